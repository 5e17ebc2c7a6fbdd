"""Loading and saving relation tables.

A relation table is an ordered list of relation definitions. On disk it is
a YAML file::

    language: UniversalChinese
    relations:
      - short_name: dep
        long_name: dependent
      - short_name: nsubj
        long_name: nominal subject
        parent: subj
        labels: IP|NP
        patterns:
          - "IP < (NP=target $+ VP)"
      - short_name: nn
        long_name: noun compound
        parent: compound
        labels: ^NP
        universal: false
        patterns: [...]

Order matters: it is the resolution priority of the relations.

In code a table may also be written as a flat list of definitions with the
``LANGUAGE_SPECIFIC`` marker placed right after each relation that is
specific to this language variant.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Sequence, Tuple, Union

import yaml

from .errors import InvalidHierarchy
from .relation import RelationDefinition

logger = logging.getLogger(__name__)


class _LanguageSpecificMarker:
    def __repr__(self) -> str:
        return "LANGUAGE_SPECIFIC"


LANGUAGE_SPECIFIC = _LanguageSpecificMarker()

RawTable = Sequence[Union[RelationDefinition, _LanguageSpecificMarker]]


def definitions_from_raw(raw: RawTable) -> List[RelationDefinition]:
    """Fold ``LANGUAGE_SPECIFIC`` markers into explicit universal flags.

    A marker applies to the relation immediately before it, and only to
    that one.
    """
    definitions: List[RelationDefinition] = []
    previous_was_marker = True
    for entry in raw:
        if entry is LANGUAGE_SPECIFIC:
            if previous_was_marker:
                raise InvalidHierarchy(
                    "LANGUAGE_SPECIFIC marker must directly follow a relation definition"
                )
            definitions[-1] = replace(definitions[-1], universal=False)
            previous_was_marker = True
        elif isinstance(entry, RelationDefinition):
            definitions.append(entry)
            previous_was_marker = False
        else:
            raise TypeError(f"Unexpected relation table entry: {entry!r}")
    return definitions


def load_definitions(path: Union[str, Path]) -> Tuple[str, List[RelationDefinition]]:
    """Load a relation table from YAML.

    Parameters
    ----------
    path : str or Path
        Path to the YAML relation table

    Returns
    -------
    Tuple[str, List[RelationDefinition]]
        Language name and relation definitions in declaration order
    """
    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    language = config.get("language", "")
    rows: List[Any] = config.get("relations") or []
    if not isinstance(rows, list):
        raise InvalidHierarchy(f"'relations' in {path} must be a list, got {type(rows).__name__}")

    definitions = []
    for i, row in enumerate(rows):
        if not isinstance(row, dict) or "short_name" not in row:
            raise InvalidHierarchy(f"Relation #{i} in {path} has no short_name: {row!r}")
        definitions.append(RelationDefinition.from_dict(row))

    logger.info(f"Loaded {len(definitions)} relation definitions for {language or 'unknown language'} from {path}")
    return language, definitions


def save_definitions(
    definitions: Sequence[RelationDefinition],
    path: Union[str, Path],
    language: str = "",
) -> None:
    """Write relation definitions to a YAML relation table."""
    config = {
        "language": language,
        "relations": [d.to_dict() for d in definitions],
    }
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f, allow_unicode=True, sort_keys=False, default_flow_style=False)
