"""Error taxonomy for relation registry construction and lookup."""


class RelationError(Exception):
    """Base class for all relation registry errors."""


class DuplicateRelationName(RelationError):
    """Two relations in one registry share a short name."""

    def __init__(self, short_name: str):
        super().__init__(f"Duplicate relation short name: {short_name!r}")
        self.short_name = short_name


class MissingRoot(RelationError):
    """No relation in the table is unparented."""

    def __init__(self):
        super().__init__("Relation hierarchy has no root (no relation without a parent)")


class InvalidHierarchy(RelationError):
    """The parent links do not form a single-rooted tree."""


class UnknownRelation(RelationError, KeyError):
    """Lookup of a short name that is not in the registry."""

    def __init__(self, short_name: str):
        super().__init__(short_name)
        self.short_name = short_name

    def __str__(self) -> str:
        return f"Unknown relation: {self.short_name!r}"


class PatternCompilationFailure(RelationError):
    """A relation's tree pattern could not be compiled."""

    def __init__(self, short_name: str, pattern: str, reason: str):
        super().__init__(
            f"Cannot compile pattern for relation {short_name!r}: {pattern!r} ({reason})"
        )
        self.short_name = short_name
        self.pattern = pattern
        self.reason = reason
