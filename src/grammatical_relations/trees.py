"""Tree context over nltk parse trees.

A ``TreeContext`` pairs the node under evaluation with the whole tree it
belongs to, so structural patterns can look at ancestors, sisters and
preceding or following material. Nodes are addressed by nltk tree
positions (tuples of child indices); leaves are nodes too and their label
is the word itself.
"""

from typing import Any, Dict, List, Optional, Tuple

from nltk.tree import ParentedTree, Tree

Position = Tuple[int, ...]


class _TreeIndex:
    """Pre-order positions and leaf spans of one tree, computed once."""

    def __init__(self, root: Tree):
        self.preorder: List[Position] = [tuple(p) for p in root.treepositions()]
        self.spans: Dict[Position, Tuple[int, int]] = {}

        leaves = [tuple(p) for p in root.treepositions("leaves")]
        for leaf_idx, leaf_pos in enumerate(leaves):
            for depth in range(len(leaf_pos) + 1):
                prefix = leaf_pos[:depth]
                start, end = self.spans.get(prefix, (leaf_idx, leaf_idx + 1))
                self.spans[prefix] = (min(start, leaf_idx), max(end, leaf_idx + 1))

        # Constituents without leaves sit, zero-width, before the next leaf.
        leaf_set = set(leaves)
        seen = 0
        for pos in self.preorder:
            if pos not in self.spans:
                self.spans[pos] = (seen, seen)
            if pos in leaf_set:
                seen += 1


class TreeContext:
    """A node of a parse tree together with the tree it lives in.

    Parameters
    ----------
    root : Tree
        The whole parse tree
    position : Position
        Tree position of the node under evaluation (``()`` is the root)
    """

    def __init__(self, root: Tree, position: Position = (), _index: Optional[_TreeIndex] = None):
        if not isinstance(root, Tree):
            raise TypeError(f"Expected an nltk Tree, got {type(root).__name__}")
        self.root = root
        self.position = tuple(position)
        self._index = _index

    @classmethod
    def of(cls, node: Any) -> "TreeContext":
        """Build a context for a node.

        ``ParentedTree`` subtrees know their root and position; a plain
        ``Tree`` is taken to be the root of its own tree.
        """
        if isinstance(node, TreeContext):
            return node
        if isinstance(node, ParentedTree):
            return cls(node.root(), node.treeposition())
        if isinstance(node, Tree):
            return cls(node, ())
        raise TypeError(
            f"Cannot evaluate patterns on {type(node).__name__}; "
            "pass a ParentedTree subtree or a TreeContext"
        )

    @property
    def index(self) -> _TreeIndex:
        if self._index is None:
            self._index = _TreeIndex(self.root)
        return self._index

    @property
    def node(self) -> Any:
        return self.node_at(self.position)

    @property
    def label(self) -> str:
        return self.label_at(self.position)

    def at(self, position: Position) -> "TreeContext":
        """Context for another node of the same tree, sharing the index."""
        return TreeContext(self.root, position, _index=self.index)

    def node_at(self, position: Position) -> Any:
        return self.root[position] if position else self.root

    def label_at(self, position: Position) -> str:
        node = self.node_at(position)
        if isinstance(node, Tree):
            return node.label()
        return str(node)

    def is_leaf(self, position: Position) -> bool:
        return not isinstance(self.node_at(position), Tree)

    def positions(self) -> List[Position]:
        """All node positions in pre-order, leaves included."""
        return self.index.preorder

    def span(self, position: Position) -> Tuple[int, int]:
        """Leaf-index span ``[start, end)`` covered by the node."""
        return self.index.spans[position]

    def __repr__(self) -> str:
        return f"TreeContext({self.label!r} at {self.position})"
