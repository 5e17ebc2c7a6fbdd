"""Grammatical relation records.

A ``RelationDefinition`` is one row of the relation table as authored;
a ``GrammaticalRelation`` is the validated, immutable record the registry
builds from it, with its parent resolved, its patterns compiled and its
priority and universal flag set.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class RelationDefinition:
    """One relation as written in the relation table.

    Attributes
    ----------
    short_name : str
        Unique identifier used for lookup and output (e.g. "nsubj")
    long_name : str
        Human-readable name (e.g. "nominal subject")
    parent : Optional[str]
        Short name of the parent relation, None for the hierarchy root
    labels : Optional[str]
        Regular expression the head node's label must fully match
    patterns : List[str]
        Tree patterns, in precedence order, each binding a "target" node
    universal : bool
        False for relations specific to this language variant
    """

    short_name: str
    long_name: str
    parent: Optional[str] = None
    labels: Optional[str] = None
    patterns: List[str] = field(default_factory=list)
    universal: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML export."""
        row: Dict[str, Any] = {
            "short_name": self.short_name,
            "long_name": self.long_name,
        }
        if self.parent is not None:
            row["parent"] = self.parent
        if self.labels is not None:
            row["labels"] = self.labels
        if self.patterns:
            row["patterns"] = list(self.patterns)
        if not self.universal:
            row["universal"] = False
        return row

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "RelationDefinition":
        return cls(
            short_name=row["short_name"],
            long_name=row.get("long_name", row["short_name"]),
            parent=row.get("parent"),
            labels=row.get("labels"),
            patterns=[str(p).strip() for p in row.get("patterns") or []],
            universal=bool(row.get("universal", True)),
        )


@dataclass(frozen=True, eq=False)
class GrammaticalRelation:
    """A typed grammatical relation in the hierarchy.

    Instances are only created by the registry. Equality is identity:
    two registries built from the same table hold distinct relations.
    """

    short_name: str
    long_name: str
    parent: Optional["GrammaticalRelation"] = field(default=None, repr=False)
    label_pattern: Optional[re.Pattern] = field(default=None, repr=False)
    patterns: Tuple[str, ...] = field(default=(), repr=False)
    matchers: Tuple[Any, ...] = field(default=(), repr=False)
    universal: bool = True
    priority: int = 0

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_abstract(self) -> bool:
        """True for pure categories that carry no patterns."""
        return not self.patterns

    @property
    def depth(self) -> int:
        return len(self.ancestors())

    def ancestors(self) -> List["GrammaticalRelation"]:
        """Parent chain, nearest first, ending at the root."""
        chain = []
        rel = self.parent
        while rel is not None:
            chain.append(rel)
            rel = rel.parent
        return chain

    def is_ancestor_of(self, other: "GrammaticalRelation") -> bool:
        """True if ``other``'s parent chain includes this relation."""
        return any(rel is self for rel in other.ancestors())

    def is_applicable(self, label: Optional[str]) -> bool:
        """Cheap pre-filter on the head node's label."""
        if self.label_pattern is None or label is None:
            return False
        return self.label_pattern.match(label) is not None

    def __str__(self) -> str:
        return self.short_name


def compile_label_pattern(labels: Optional[str]) -> Optional[re.Pattern]:
    """Compile a label expression so that it must match the whole label."""
    if labels is None:
        return None
    return re.compile(f"^(?:{labels})$")
