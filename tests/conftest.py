"""Shared fixtures: a fake pattern compiler, small relation tables, trees."""

from typing import Dict, Iterator, List

import pytest
from nltk.tree import ParentedTree, Tree

from grammatical_relations import (
    LANGUAGE_SPECIFIC,
    PatternCompiler,
    RelationDefinition,
    RelationRegistry,
    TreeContext,
    TreeMatcher,
)
from grammatical_relations.trees import Position


class ChildPattern(TreeMatcher):
    """Fake query ``HEAD < CHILD``: binds every child labelled CHILD as target."""

    def __init__(self, query: str, calls: List[tuple]):
        self.query = query
        self.head, self.child = [part.strip() for part in query.split("<")]
        self.calls = calls

    def iter_matches(self, context: TreeContext) -> Iterator[Dict[str, Position]]:
        self.calls.append((self.query, context.label))
        if context.label != self.head:
            return
        for i, kid in enumerate(context.node):
            if isinstance(kid, Tree) and kid.label() == self.child:
                yield {"target": context.position + (i,)}


class ChildCompiler(PatternCompiler):
    """Compiles ``HEAD < CHILD`` queries and records every evaluation."""

    def __init__(self):
        self.calls: List[tuple] = []

    def compile(self, query: str) -> ChildPattern:
        if query.count("<") != 1:
            raise ValueError(f"Fake compiler only understands 'HEAD < CHILD', got {query!r}")
        return ChildPattern(query, self.calls)


@pytest.fixture
def compiler() -> ChildCompiler:
    return ChildCompiler()


@pytest.fixture
def raw_table() -> list:
    return [
        RelationDefinition("dep", "dependent"),
        RelationDefinition("arg", "argument", parent="dep"),
        RelationDefinition("subj", "subject", parent="arg"),
        RelationDefinition("nsubj", "nominal subject", parent="subj", labels="IP", patterns=["IP < NP"]),
        RelationDefinition("comp", "complement", parent="arg"),
        RelationDefinition("dobj", "direct object", parent="comp", labels="VP", patterns=["VP < NP"]),
        RelationDefinition("mod", "modifier", parent="dep"),
        RelationDefinition("advmod", "adverbial modifier", parent="mod", labels="VP|IP",
                           patterns=["VP < ADVP", "IP < ADVP"]),
        RelationDefinition("dvpmod", "dvp modifier", parent="advmod", labels="VP", patterns=["VP < DVP"]),
        LANGUAGE_SPECIFIC,
        RelationDefinition("punct", "punctuation", parent="dep", labels=".*", patterns=["IP < PU", "VP < PU"]),
    ]


@pytest.fixture
def registry(raw_table, compiler) -> RelationRegistry:
    return RelationRegistry.build_from_table(raw_table, compiler=compiler, language="Test")


def tree(text: str) -> ParentedTree:
    return ParentedTree.fromstring(text)
