"""Relation resolution over parse trees.

Given a node of a parse tree, the resolver walks the registry's relations
in priority order and returns the first relation one of whose patterns
matches at the node, together with the dependent ("target") node the
pattern binds. Within a relation, patterns are also tried in order. Later
relations and later patterns are never consulted once one has matched.

Relations with no patterns are abstract categories and are never returned
as direct matches. A relation whose label expression rejects the node's
label is skipped without running any of its patterns.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from nltk.tree import Tree
from tqdm.auto import tqdm

from . import config
from .registry import RelationRegistry, get_default_registry
from .relation import GrammaticalRelation
from .trees import Position, TreeContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """The relation found at a head node.

    Attributes
    ----------
    relation : GrammaticalRelation
        Relation holding between the head and the target
    head_position : Position
        Tree position of the head node
    target_position : Optional[Position]
        Tree position of the dependent, None for a fallback resolution
    target : Any
        The dependent node itself (subtree, or word for a leaf)
    pattern : Optional[str]
        The pattern that matched, None for a fallback resolution
    """

    relation: GrammaticalRelation
    head_position: Position
    target_position: Optional[Position] = None
    target: Any = None
    pattern: Optional[str] = None

    @property
    def short_name(self) -> str:
        return self.relation.short_name

    @property
    def is_fallback(self) -> bool:
        return self.pattern is None


class RelationResolver:
    """Determine relations and dependents at parse-tree nodes.

    Parameters
    ----------
    registry : Optional[RelationRegistry]
        Relation hierarchy to resolve against (default: the shipped table)
    target_name : str
        Name of the pattern binding that designates the dependent
    """

    def __init__(
        self,
        registry: Optional[RelationRegistry] = None,
        target_name: str = config.TARGET_NODE_NAME,
    ):
        self.registry = registry if registry is not None else get_default_registry()
        self.target_name = target_name

    def _candidates(self, context: TreeContext) -> List[GrammaticalRelation]:
        label = context.label
        return [
            rel for rel in self.registry.all()
            if not rel.is_abstract and rel.is_applicable(label)
        ]

    def _targets(self, relation: GrammaticalRelation, context: TreeContext, first_only: bool):
        for pattern, matcher in zip(relation.patterns, relation.matchers):
            for bindings in matcher.iter_matches(context):
                target = bindings.get(self.target_name)
                if target is None:
                    continue
                yield pattern, tuple(target)
                if first_only:
                    break

    def resolve(self, node: Any, universal: bool = False) -> Optional[Resolution]:
        """Most specific relation applicable at ``node``, or None.

        Parameters
        ----------
        node : ParentedTree, Tree or TreeContext
            Head node to resolve
        universal : bool
            Report the nearest universal relation instead of a
            language-specific one

        Returns
        -------
        Optional[Resolution]
            The first match in relation then pattern order
        """
        context = TreeContext.of(node)
        for relation in self._candidates(context):
            for pattern, target in self._targets(relation, context, first_only=True):
                if universal:
                    relation = self.registry.universal_ancestor(relation)
                logger.debug(f"{relation.short_name} at {context.label}{context.position} -> {target} via {pattern!r}")
                return Resolution(
                    relation=relation,
                    head_position=context.position,
                    target_position=target,
                    target=context.node_at(target),
                    pattern=pattern,
                )
        return None

    def resolve_or_default(self, node: Any, universal: bool = False) -> Resolution:
        """Like ``resolve``, falling back to the root ("dependent") relation."""
        resolution = self.resolve(node, universal=universal)
        if resolution is not None:
            return resolution
        return Resolution(relation=self.registry.root, head_position=TreeContext.of(node).position)

    def related_nodes(self, relation: GrammaticalRelation, node: Any) -> List[Any]:
        """All distinct dependents ``relation`` binds at ``node``.

        Patterns are tried in order and every match of each is collected;
        an inapplicable or abstract relation yields an empty list.
        """
        context = TreeContext.of(node)
        if relation.is_abstract or not relation.is_applicable(context.label):
            return []

        seen = set()
        nodes = []
        for _, target in self._targets(relation, context, first_only=False):
            if target not in seen:
                seen.add(target)
                nodes.append(context.node_at(target))
        return nodes

    def relation_between(self, head: Any, dependent: Any) -> GrammaticalRelation:
        """First relation in priority order that links ``head`` to ``dependent``.

        ``dependent`` may be a node of the same tree or its tree position.
        Falls back to the root relation when none does.
        """
        context = TreeContext.of(head)
        if isinstance(dependent, tuple):
            dependent_position = dependent
        else:
            dependent_position = TreeContext.of(dependent).position
        for relation in self._candidates(context):
            for _, target in self._targets(relation, context, first_only=False):
                if target == dependent_position:
                    return relation
        return self.registry.root

    def resolve_tree(self, tree: Tree, universal: bool = False) -> List[Resolution]:
        """Resolve every non-leaf node of a tree, in pre-order."""
        root = TreeContext(tree)
        resolutions = []
        for position in root.positions():
            if root.is_leaf(position):
                continue
            resolution = self.resolve(root.at(position), universal=universal)
            if resolution is not None:
                resolutions.append(resolution)
        return resolutions

    def resolve_trees(
        self,
        trees: Iterable[Tree],
        universal: bool = False,
        show_progress: bool = False,
    ) -> List[List[Resolution]]:
        """Resolve a batch of trees (e.g. a treebank)."""
        results = []
        for tree in tqdm(trees, desc="Resolving relations", disable=not show_progress):
            results.append(self.resolve_tree(tree, universal=universal))
        logger.info(f"Resolved {sum(len(r) for r in results)} relations in {len(results)} trees")
        return results
