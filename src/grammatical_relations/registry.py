"""Relation registry: the validated relation hierarchy of one language.

The registry is built once from an ordered relation table. Building
validates the hierarchy (unique short names, a single root, no cycles)
and compiles every tree pattern, so a broken rule fails at start-up rather
than during resolution. Afterwards the registry is read-mostly shared
state: the ordered relation list sits behind a reader/writer lock and the
short-name index is a plain dict that is only written under the write lock.

Usage:
    registry = RelationRegistry.from_yaml("relations.yaml")
    nsubj = registry.lookup("nsubj")
    universal = registry.universal_subset()
"""

import logging
import re
import threading
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from . import config
from .errors import (
    DuplicateRelationName,
    InvalidHierarchy,
    PatternCompilationFailure,
    RelationError,
    UnknownRelation,
)
from .matching import PatternCompiler, TreeMatcher
from .relation import GrammaticalRelation, RelationDefinition, compile_label_pattern
from .table import RawTable, definitions_from_raw, load_definitions
from .tregex import TregexCompiler
from .utils.locks import ReadWriteLock
from .utils.validators import HierarchyValidator

logger = logging.getLogger(__name__)


def _compile_patterns(definition: RelationDefinition, compiler: PatternCompiler) -> Tuple[TreeMatcher, ...]:
    matchers = []
    for pattern in definition.patterns:
        try:
            matcher = compiler.compile(pattern)
        except Exception as e:
            logger.error(f"Pattern compilation failed for {definition.short_name!r}: {pattern!r}")
            raise PatternCompilationFailure(definition.short_name, pattern, f"{type(e).__name__}: {e}") from e

        names = getattr(matcher, "names", None)
        if names is not None and config.TARGET_NODE_NAME not in names:
            logger.error(f"Pattern for {definition.short_name!r} binds no {config.TARGET_NODE_NAME!r} node: {pattern!r}")
            raise PatternCompilationFailure(
                definition.short_name, pattern, f"no node is named {config.TARGET_NODE_NAME!r}"
            )
        matchers.append(matcher)
    return tuple(matchers)


def _compile_labels(definition: RelationDefinition) -> Optional[re.Pattern]:
    try:
        return compile_label_pattern(definition.labels)
    except re.error as e:
        logger.error(f"Label expression failed for {definition.short_name!r}: {definition.labels!r}")
        raise PatternCompilationFailure(definition.short_name, definition.labels, str(e)) from e


class RelationRegistry:
    """Ordered, validated set of grammatical relations.

    Parameters
    ----------
    relations : Sequence[GrammaticalRelation]
        Relations in priority order, already linked to their parents
    language : str
        Language variant the relations describe

    Use ``build``, ``build_from_table`` or ``from_yaml`` rather than calling
    the constructor directly.
    """

    def __init__(self, relations: Sequence[GrammaticalRelation], language: str = "",
                 compiler: Optional[PatternCompiler] = None):
        self.language = language
        self._compiler = compiler or TregexCompiler()
        self._lock = ReadWriteLock()
        self._values: List[GrammaticalRelation] = list(relations)
        self._by_name: Dict[str, GrammaticalRelation] = {r.short_name: r for r in self._values}
        roots = [r for r in self._values if r.is_root]
        self._root = roots[0] if roots else None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        definitions: Sequence[RelationDefinition],
        compiler: Optional[PatternCompiler] = None,
        language: str = "",
    ) -> "RelationRegistry":
        """Validate definitions, compile their patterns and link the hierarchy.

        Raises
        ------
        DuplicateRelationName, MissingRoot, InvalidHierarchy, PatternCompilationFailure
        """
        compiler = compiler or TregexCompiler()
        definitions = list(definitions)
        try:
            HierarchyValidator(definitions).validate()
        except RelationError as e:
            logger.error(f"Invalid relation table for {language or 'unknown language'}: {e}")
            raise

        by_name = {d.short_name: d for d in definitions}
        priorities = {d.short_name: i for i, d in enumerate(definitions)}
        built: Dict[str, GrammaticalRelation] = {}

        def link(name: str) -> GrammaticalRelation:
            # Parents may be declared after their children; build them first.
            if name not in built:
                definition = by_name[name]
                parent = link(definition.parent) if definition.parent is not None else None
                built[name] = GrammaticalRelation(
                    short_name=definition.short_name,
                    long_name=definition.long_name,
                    parent=parent,
                    label_pattern=_compile_labels(definition),
                    patterns=tuple(definition.patterns),
                    matchers=_compile_patterns(definition, compiler),
                    universal=definition.universal,
                    priority=priorities[name],
                )
            return built[name]

        relations = [link(d.short_name) for d in definitions]
        registry = cls(relations, language=language, compiler=compiler)
        logger.info(
            f"Built relation registry for {language or 'unknown language'}: "
            f"{len(relations)} relations ({len(registry.universal_subset())} universal)"
        )
        return registry

    @classmethod
    def build_from_table(
        cls,
        raw: RawTable,
        compiler: Optional[PatternCompiler] = None,
        language: str = "",
    ) -> "RelationRegistry":
        """Build from definitions interleaved with ``LANGUAGE_SPECIFIC`` markers."""
        return cls.build(definitions_from_raw(raw), compiler=compiler, language=language)

    @classmethod
    def from_yaml(
        cls,
        path: Union[str, Path] = config.DEFAULT_RELATIONS_FILE,
        compiler: Optional[PatternCompiler] = None,
    ) -> "RelationRegistry":
        """Build from a YAML relation table."""
        language, definitions = load_definitions(path)
        return cls.build(definitions, compiler=compiler, language=language)

    def register(self, definition: RelationDefinition) -> GrammaticalRelation:
        """Append one relation at the lowest priority.

        Takes the exclusive lock; readers holding ``read_lock()`` finish first.
        """
        label_pattern = _compile_labels(definition)
        matchers = _compile_patterns(definition, self._compiler)

        with self._lock.write_lock():
            if definition.short_name in self._by_name:
                raise DuplicateRelationName(definition.short_name)
            if definition.parent is None:
                raise InvalidHierarchy(
                    f"Cannot register {definition.short_name!r}: the hierarchy already has a root"
                )
            parent = self._by_name.get(definition.parent)
            if parent is None:
                raise InvalidHierarchy(
                    f"Relation {definition.short_name!r} has unknown parent {definition.parent!r}"
                )
            relation = GrammaticalRelation(
                short_name=definition.short_name,
                long_name=definition.long_name,
                parent=parent,
                label_pattern=label_pattern,
                patterns=tuple(definition.patterns),
                matchers=matchers,
                universal=definition.universal,
                priority=len(self._values),
            )
            self._values.append(relation)
            self._by_name[relation.short_name] = relation

        logger.info(f"Registered relation {relation.short_name!r} under {parent.short_name!r}")
        return relation

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def read_lock(self):
        """Shared guard over the relation list, for multi-step reads."""
        return self._lock.read_lock()

    def all(self) -> Tuple[GrammaticalRelation, ...]:
        """Every relation in priority (declaration) order."""
        with self._lock.read_lock():
            return tuple(self._values)

    def lookup(self, short_name: str) -> GrammaticalRelation:
        """Return the relation with this short name.

        Raises
        ------
        UnknownRelation
            If no relation has that short name
        """
        try:
            return self._by_name[short_name]
        except KeyError:
            raise UnknownRelation(short_name) from None

    def get(self, short_name: str, default: Optional[GrammaticalRelation] = None) -> Optional[GrammaticalRelation]:
        return self._by_name.get(short_name, default)

    @property
    def root(self) -> GrammaticalRelation:
        """The generic "dependent" relation every other relation descends from."""
        return self._root

    def universal_subset(self) -> Tuple[GrammaticalRelation, ...]:
        """Relations meaningful across languages, in priority order."""
        return tuple(r for r in self.all() if r.universal)

    def language_specific_subset(self) -> Tuple[GrammaticalRelation, ...]:
        return tuple(r for r in self.all() if not r.universal)

    def children(self, relation: GrammaticalRelation) -> List[GrammaticalRelation]:
        return [r for r in self.all() if r.parent is relation]

    def universal_ancestor(self, relation: GrammaticalRelation) -> GrammaticalRelation:
        """Nearest universal relation among ``relation`` and its ancestors."""
        for candidate in [relation] + relation.ancestors():
            if candidate.universal:
                return candidate
        return self.root

    def to_pretty_string(self) -> str:
        """Indented view of the hierarchy, one relation per line."""
        lines: List[str] = []

        def walk(relation: GrammaticalRelation, indent: int) -> None:
            marker = "" if relation.universal else " *"
            lines.append(f"{'  ' * indent}{relation.short_name} ({relation.long_name}){marker}")
            for child in self.children(relation):
                walk(child, indent + 1)

        if self.root is not None:
            walk(self.root, 0)
        return "\n".join(lines)

    def __contains__(self, short_name: object) -> bool:
        return short_name in self._by_name

    def __len__(self) -> int:
        with self._lock.read_lock():
            return len(self._values)

    def __iter__(self) -> Iterator[GrammaticalRelation]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"RelationRegistry({self.language!r}, {len(self)} relations)"


_default_registry: Optional[RelationRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> RelationRegistry:
    """Process-wide registry built from the shipped relation table.

    Built on first call; concurrent first calls build it only once.
    """
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = RelationRegistry.from_yaml(config.DEFAULT_RELATIONS_FILE)
    return _default_registry


def reset_default_registry() -> None:
    """Forget the process-wide registry so the next call rebuilds it."""
    global _default_registry
    with _default_lock:
        _default_registry = None
