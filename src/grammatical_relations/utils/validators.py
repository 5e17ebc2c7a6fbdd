"""Validation of relation definitions before a registry is built."""

from typing import Dict, List, Optional, Sequence

from ..errors import DuplicateRelationName, InvalidHierarchy, MissingRoot
from ..relation import RelationDefinition


class HierarchyValidator:
    """Check that relation definitions form a single-rooted tree."""

    def __init__(self, definitions: Sequence[RelationDefinition]):
        self.definitions = list(definitions)

    def check_unique_names(self) -> Dict[str, RelationDefinition]:
        """Index definitions by short name, rejecting duplicates."""
        by_name: Dict[str, RelationDefinition] = {}
        for definition in self.definitions:
            if not definition.short_name:
                raise InvalidHierarchy(f"Relation without a short name: {definition.long_name!r}")
            if definition.short_name in by_name:
                raise DuplicateRelationName(definition.short_name)
            by_name[definition.short_name] = definition
        return by_name

    def check_root(self) -> RelationDefinition:
        """Return the single unparented definition."""
        roots = [d for d in self.definitions if d.parent is None]
        if not roots:
            raise MissingRoot()
        if len(roots) > 1:
            names = ", ".join(d.short_name for d in roots)
            raise InvalidHierarchy(f"Relation hierarchy has several roots: {names}")
        return roots[0]

    def check_parents(self, by_name: Dict[str, RelationDefinition]) -> None:
        """Every parent must be defined and every chain must reach the root."""
        for definition in self.definitions:
            if definition.parent is not None and definition.parent not in by_name:
                raise InvalidHierarchy(
                    f"Relation {definition.short_name!r} has unknown parent {definition.parent!r}"
                )

        for definition in self.definitions:
            seen: List[str] = []
            current: Optional[RelationDefinition] = definition
            while current is not None:
                if current.short_name in seen:
                    cycle = " -> ".join(seen + [current.short_name])
                    raise InvalidHierarchy(f"Cycle in relation hierarchy: {cycle}")
                seen.append(current.short_name)
                current = by_name.get(current.parent) if current.parent is not None else None

    def validate(self) -> RelationDefinition:
        """Run all checks and return the root definition."""
        by_name = self.check_unique_names()
        root = self.check_root()
        self.check_parents(by_name)
        return root
