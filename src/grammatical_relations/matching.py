"""Interfaces of the structural matching capability.

The registry compiles every pattern of the relation table once, through a
``PatternCompiler``; the resolver evaluates the resulting ``TreeMatcher``
objects against a ``TreeContext``. The default implementation is
``tregex.TregexCompiler``; tests inject simpler ones.
"""

from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, Iterator, Optional

from .trees import Position, TreeContext


class TreeMatcher(ABC):
    """A compiled structural query anchored at the context node.

    ``names`` holds the node names every match binds, or None when the
    matcher cannot tell in advance.
    """

    query: str
    names: Optional[FrozenSet[str]] = None

    @abstractmethod
    def iter_matches(self, context: TreeContext) -> Iterator[Dict[str, Position]]:
        """Yield the named nodes bound by each way the query matches.

        Args:
            context: Node under evaluation, with its whole tree

        Returns:
            Iterator over ``{name: tree position}`` dictionaries
        """
        pass

    def matches(self, context: TreeContext) -> Optional[Dict[str, Position]]:
        """First set of bindings, or None if the query does not match."""
        return next(self.iter_matches(context), None)


class PatternCompiler(ABC):
    """Turns query strings into matchers; raises ``ValueError`` on bad input.

    The registry reports any exception raised by ``compile`` as a
    ``PatternCompilationFailure``.
    """

    @abstractmethod
    def compile(self, query: str) -> TreeMatcher:
        pass
