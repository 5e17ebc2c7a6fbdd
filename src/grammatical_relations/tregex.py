"""Tregex-style structural patterns over nltk parse trees.

This is the default matching oracle used to compile the relation table.
It covers the part of the Tregex query language the relation table is
written in:

Node descriptions
    ``NP`` (exact label), ``/^V/`` (regex search), ``__`` (any node),
    ``NP|QP`` (alternatives), ``!PU`` (negation), ``NP=target`` (binding),
    ``( ... )`` (a parenthesised sub-pattern).

Relations (``A op B``, any of them negated as ``A !op B``)
    ``<`` child, ``>`` parent, ``<<`` descendant, ``>>`` ancestor,
    ``<:`` only child, ``<,`` first child, ``<-`` last child,
    ``$`` sister, ``$+`` / ``$-`` immediate right / left sister of,
    ``$++`` / ``$--`` left / right sister of, ``.`` / ``..`` immediately
    precedes / precedes, ``,`` / ``,,`` immediately follows / follows,
    ``<+(C)`` / ``>+(C)`` dominates / is dominated via a chain of C nodes.

Every relation written after a node applies to that node, so
``VP < VV < NP`` means the VP has both a VV child and an NP child. A child
written without parentheses takes no relations of its own. Relations may be
grouped with parentheses: ``PU (<: /,/ $+ VP)``.

Example
-------
>>> from nltk.tree import ParentedTree
>>> tree = ParentedTree.fromstring("(IP (NP (NN a)) (VP (VV b)))")
>>> pattern = TregexCompiler().compile("IP < (NP=target $+ VP)")
>>> pattern.matches(TreeContext.of(tree))
{'target': (0,)}
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Union

from .matching import PatternCompiler, TreeMatcher
from .trees import Position, TreeContext

Bindings = Dict[str, Position]

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<regex>/(?:\\.|[^/\\])*/)
    | (?P<chain><\+|>\+)
    | (?P<op>\$\+\+|\$--|<<|>>|\$\+|\$-|\.\.|,,|<:|<,|<-|<|>|\$|\.|,)
    | (?P<punct>[!=|()])
    | (?P<label>[^\s!=|()/<>$.,]+)
    """,
    re.VERBOSE,
)


class TregexParseError(ValueError):
    """A pattern string is not a well-formed query."""

    def __init__(self, query: str, message: str):
        super().__init__(f"{message} in pattern {query!r}")
        self.query = query


@dataclass
class _Token:
    kind: str
    text: str
    offset: int


@dataclass
class _NodeDesc:
    """One node of a pattern: label test, optional binding, relations."""

    alternatives: List[Union[str, re.Pattern]]
    negated: bool = False
    name: Optional[str] = None
    relations: List["_Relation"] = field(default_factory=list)

    def accepts(self, label: str) -> bool:
        hit = any(
            alt == "__" or (alt.search(label) is not None if isinstance(alt, re.Pattern) else alt == label)
            for alt in self.alternatives
        )
        return hit != self.negated


@dataclass
class _Relation:
    op: str
    child: _NodeDesc
    negated: bool = False
    chain: Optional[_NodeDesc] = None


def _children(ctx: TreeContext, pos: Position) -> List[Position]:
    if ctx.is_leaf(pos):
        return []
    return [pos + (i,) for i in range(len(ctx.node_at(pos)))]


def _sisters(ctx: TreeContext, pos: Position) -> List[Position]:
    if not pos:
        return []
    return _children(ctx, pos[:-1])


def _descendants(ctx: TreeContext, pos: Position) -> List[Position]:
    depth = len(pos)
    return [p for p in ctx.positions() if len(p) > depth and p[:depth] == pos]


def _ancestors(pos: Position) -> List[Position]:
    return [pos[:depth] for depth in range(len(pos) - 1, -1, -1)]


def _only_child(ctx: TreeContext, pos: Position) -> List[Position]:
    kids = _children(ctx, pos)
    return kids if len(kids) == 1 else []


def _right_sisters(ctx: TreeContext, pos: Position) -> List[Position]:
    return [p for p in _sisters(ctx, pos) if p[-1] > pos[-1]]


def _left_sisters(ctx: TreeContext, pos: Position) -> List[Position]:
    return [p for p in _sisters(ctx, pos) if p[-1] < pos[-1]]


def _following(ctx: TreeContext, pos: Position, immediate: bool) -> List[Position]:
    end = ctx.span(pos)[1]
    if immediate:
        return [p for p in ctx.positions() if ctx.span(p)[0] == end]
    return [p for p in ctx.positions() if ctx.span(p)[0] >= end]


def _preceding(ctx: TreeContext, pos: Position, immediate: bool) -> List[Position]:
    start = ctx.span(pos)[0]
    if immediate:
        return [p for p in ctx.positions() if ctx.span(p)[1] == start]
    return [p for p in ctx.positions() if ctx.span(p)[1] <= start]


_CANDIDATES: Dict[str, Callable[[TreeContext, Position], List[Position]]] = {
    "<": _children,
    ">": lambda ctx, pos: [pos[:-1]] if pos else [],
    "<<": _descendants,
    ">>": lambda ctx, pos: _ancestors(pos),
    "<:": _only_child,
    "<,": lambda ctx, pos: _children(ctx, pos)[:1],
    "<-": lambda ctx, pos: _children(ctx, pos)[-1:],
    "$": lambda ctx, pos: [p for p in _sisters(ctx, pos) if p != pos],
    "$+": lambda ctx, pos: _right_sisters(ctx, pos)[:1],
    "$-": lambda ctx, pos: _left_sisters(ctx, pos)[-1:],
    "$++": _right_sisters,
    "$--": _left_sisters,
    ".": lambda ctx, pos: _following(ctx, pos, immediate=True),
    "..": lambda ctx, pos: _following(ctx, pos, immediate=False),
    ",": lambda ctx, pos: _preceding(ctx, pos, immediate=True),
    ",,": lambda ctx, pos: _preceding(ctx, pos, immediate=False),
}


def _chain_down(ctx: TreeContext, pos: Position, via: _NodeDesc) -> Iterator[Position]:
    for kid in _children(ctx, pos):
        yield kid
        if via.accepts(ctx.label_at(kid)):
            yield from _chain_down(ctx, kid, via)


def _chain_up(ctx: TreeContext, pos: Position, via: _NodeDesc) -> Iterator[Position]:
    while pos:
        pos = pos[:-1]
        yield pos
        if not via.accepts(ctx.label_at(pos)):
            return


def _candidates(rel: _Relation, ctx: TreeContext, pos: Position) -> Iterator[Position]:
    if rel.op == "<+":
        return _chain_down(ctx, pos, rel.chain)
    if rel.op == ">+":
        return _chain_up(ctx, pos, rel.chain)
    return iter(_CANDIDATES[rel.op](ctx, pos))


def _match_node(desc: _NodeDesc, ctx: TreeContext, pos: Position, bindings: Bindings) -> Iterator[Bindings]:
    if not desc.accepts(ctx.label_at(pos)):
        return
    if desc.name:
        bindings = {**bindings, desc.name: pos}
    yield from _match_relations(desc.relations, 0, ctx, pos, bindings)


def _match_relations(
    relations: List[_Relation],
    i: int,
    ctx: TreeContext,
    pos: Position,
    bindings: Bindings,
) -> Iterator[Bindings]:
    if i == len(relations):
        yield bindings
        return

    rel = relations[i]
    if rel.negated:
        for cand in _candidates(rel, ctx, pos):
            for _ in _match_node(rel.child, ctx, cand, bindings):
                return
        yield from _match_relations(relations, i + 1, ctx, pos, bindings)
        return

    for cand in _candidates(rel, ctx, pos):
        for extended in _match_node(rel.child, ctx, cand, bindings):
            yield from _match_relations(relations, i + 1, ctx, pos, extended)


def _bound_names(desc: _NodeDesc) -> Iterator[str]:
    # Nodes under a negated relation never appear in a match.
    if desc.name:
        yield desc.name
    for rel in desc.relations:
        if not rel.negated:
            yield from _bound_names(rel.child)


class TregexPattern(TreeMatcher):
    """A compiled structural query.

    Matching is anchored: the pattern's top node must be the context node.
    Bound nodes are reported as tree positions in the context's tree.
    """

    def __init__(self, query: str, root: _NodeDesc):
        self.query = query
        self._root = root
        self.names = frozenset(_bound_names(root))

    def iter_matches(self, context: TreeContext) -> Iterator[Bindings]:
        """Yield every set of bindings, in tree order of the candidates."""
        yield from _match_node(self._root, context, context.position, {})

    def __repr__(self) -> str:
        return f"TregexPattern({self.query!r})"


class _Parser:
    def __init__(self, query: str):
        self.query = query
        self.tokens = self._tokenize(query)
        self.i = 0

    def _tokenize(self, query: str) -> List[_Token]:
        tokens = []
        offset = 0
        while offset < len(query):
            m = _TOKEN_RE.match(query, offset)
            if m is None:
                raise TregexParseError(query, f"Unexpected character {query[offset]!r} at {offset}")
            if m.lastgroup != "ws":
                tokens.append(_Token(m.lastgroup, m.group(), offset))
            offset = m.end()
        return tokens

    def _peek(self, ahead: int = 0) -> Optional[_Token]:
        j = self.i + ahead
        return self.tokens[j] if j < len(self.tokens) else None

    def _next(self) -> _Token:
        tok = self._peek()
        if tok is None:
            raise TregexParseError(self.query, "Unexpected end of pattern")
        self.i += 1
        return tok

    def _accept(self, text: str) -> bool:
        tok = self._peek()
        if tok is not None and tok.kind == "punct" and tok.text == text:
            self.i += 1
            return True
        return False

    def _expect(self, text: str) -> None:
        if not self._accept(text):
            tok = self._peek()
            found = repr(tok.text) if tok else "end of pattern"
            raise TregexParseError(self.query, f"Expected {text!r} but found {found}")

    def _starts_relation(self, ahead: int = 0) -> bool:
        tok = self._peek(ahead)
        if tok is None:
            return False
        if tok.kind in ("op", "chain"):
            return True
        return tok.kind == "punct" and tok.text == "!" and self._starts_relation(ahead + 1)

    def parse(self) -> _NodeDesc:
        root = self._pattern()
        tok = self._peek()
        if tok is not None:
            raise TregexParseError(self.query, f"Unexpected {tok.text!r} at {tok.offset}")
        return root

    def _pattern(self) -> _NodeDesc:
        if self._accept("("):
            desc = self._pattern()
            self._expect(")")
        else:
            desc = self._description()
        self._relations(desc)
        return desc

    def _description(self) -> _NodeDesc:
        negated = self._accept("!")
        alternatives = [self._label()]
        while self._accept("|"):
            alternatives.append(self._label())
        name = None
        if self._accept("="):
            tok = self._next()
            if tok.kind != "label":
                raise TregexParseError(self.query, f"Bad node name {tok.text!r}")
            name = tok.text
        return _NodeDesc(alternatives, negated=negated, name=name)

    def _label(self) -> Union[str, re.Pattern]:
        tok = self._next()
        if tok.kind == "label":
            return tok.text
        if tok.kind == "regex":
            try:
                return re.compile(tok.text[1:-1])
            except re.error as e:
                raise TregexParseError(self.query, f"Bad regex {tok.text} ({e})") from e
        raise TregexParseError(self.query, f"Expected a node label but found {tok.text!r}")

    def _relations(self, desc: _NodeDesc) -> None:
        while True:
            if self._starts_relation():
                desc.relations.append(self._relation())
            elif self._peek() is not None and self._peek().text == "(" and self._starts_relation(1):
                self._expect("(")
                self._relations(desc)
                self._expect(")")
            else:
                return

    def _relation(self) -> _Relation:
        negated = self._accept("!")
        tok = self._next()
        chain = None
        if tok.kind == "chain":
            self._expect("(")
            chain = self._description()
            self._expect(")")
        if self._accept("("):
            child = self._pattern()
            self._expect(")")
        else:
            child = self._description()
        return _Relation(tok.text, child, negated=negated, chain=chain)


class TregexCompiler(PatternCompiler):
    """Compile Tregex-style query strings into ``TregexPattern`` objects."""

    def compile(self, query: str) -> TregexPattern:
        if not query or not query.strip():
            raise TregexParseError(query, "Empty pattern")
        return TregexPattern(query.strip(), _Parser(query).parse())
