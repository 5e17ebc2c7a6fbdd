"""Resolution with the shipped Universal Chinese relation table."""

import threading

import pytest

from grammatical_relations import (
    RelationRegistry,
    RelationResolver,
    get_default_registry,
    reset_default_registry,
)
from grammatical_relations import config

from conftest import tree

LANGUAGE_SPECIFIC_NAMES = {
    "nummod:ordmod", "prnmod", "assmod", "tmod", "dvpmod", "mmod", "asp", "nn", "comod",
    "plmod", "loc", "rcomp", "ba", "clf", "prep", "prtmod", "etc", "xsubj",
}


@pytest.fixture(scope="module")
def registry():
    return RelationRegistry.from_yaml(config.DEFAULT_RELATIONS_FILE)


@pytest.fixture(scope="module")
def resolver(registry):
    return RelationResolver(registry)


def test_table_shape(registry):
    names = [r.short_name for r in registry.all()]

    assert len(names) == 48
    assert len(set(names)) == 48
    assert names[0] == "dep"
    assert registry.root.short_name == "dep"
    assert registry.language == config.LANGUAGE


def test_universal_partition(registry):
    specific = {r.short_name for r in registry.language_specific_subset()}

    assert specific == LANGUAGE_SPECIFIC_NAMES
    assert len(registry.universal_subset()) == 30
    assert registry.lookup("range").universal


def test_abstract_categories(registry):
    abstract = {r.short_name for r in registry.all() if r.is_abstract}
    assert abstract == {"dep", "arg", "subj", "comp", "obj", "mod", "appos", "nmod", "aux", "compound"}


def test_hierarchy_links(registry):
    assert registry.lookup("nsubjpass").parent is registry.lookup("nsubj")
    assert registry.lookup("prep").parent is registry.lookup("mark")
    assert registry.lookup("nummod:ordmod").parent is registry.lookup("nummod")
    assert registry.universal_ancestor(registry.lookup("nn")) is registry.lookup("compound")
    for relation in registry.all():
        assert relation is registry.root or relation.ancestors()[-1] is registry.root


def test_nominal_subject(resolver):
    sentence = tree(
        "(ROOT (IP (NP (NP (NR 上海) (NR 浦东)) (NP (NN 开发) (CC 与) (NN 法制) (NN 建设))) (VP (VV 同步))))"
    )
    resolution = resolver.resolve(sentence[0])

    assert resolution.short_name == "nsubj"
    assert resolution.target_position == (0, 0)


def test_passive_subject_and_auxiliary(resolver):
    sentence = tree("(IP (NP (NN 镍)) (VP (SB 被) (VP (VV 称作) (NP (NN 维生素)))))")

    assert [(r.short_name, r.head_position, r.target_position) for r in resolver.resolve_tree(sentence)] == [
        ("nsubjpass", (), (0,)),
        ("auxpass", (1,), (1, 0)),
        ("dobj", (1, 1), (1, 1, 1)),
    ]


def test_copula_subject_and_copula(resolver):
    sentence = tree("(IP (NP (PN 他)) (VP (VC 是) (NP (NN 学生))))")

    subject = resolver.resolve(sentence)
    assert subject.short_name == "nsubj"
    assert subject.pattern == "IP < (/^NP/=target $+ (VP < VC))"

    copula = resolver.resolve(sentence[1])
    assert copula.short_name == "cop"
    assert copula.target.leaves() == ["是"]


def test_punctuation(resolver, registry):
    sentence = tree("(IP (NP (PN 我)) (VP (VV 来)) (PU 。))")

    assert resolver.resolve(sentence).short_name == "nsubj"
    assert resolver.relation_between(sentence, sentence[2]) is registry.lookup("punct")


def test_negation(resolver):
    vp = tree("(VP (ADVP (AD 不)) (VP (VV 去)))")
    resolution = resolver.resolve(vp)

    assert resolution.short_name == "neg"
    assert resolution.target_position == (0,)


def test_noun_compound_before_conjunct(resolver, registry):
    np = tree("(NP (NN 开发) (CC 与) (NN 法制) (NN 建设))")

    resolution = resolver.resolve(np)
    assert resolution.short_name == "nn"
    assert resolution.target_position == (2,)
    assert resolver.resolve(np, universal=True).short_name == "compound"

    conjuncts = resolver.related_nodes(registry.lookup("conj"), np)
    assert [node.leaves() for node in conjuncts] == [["开发"]]


def test_adjectival_modifier(resolver):
    np = tree("(NP (ADJP (JJ 大)) (NP (NN 城市)))")
    assert resolver.resolve(np).short_name == "amod"


def test_case_marker(resolver):
    pp = tree("(PP (P 根据) (NP (NN 规定)))")
    resolution = resolver.resolve(pp)

    assert resolution.short_name == "case"
    assert resolution.target.leaves() == ["根据"]


def test_default_registry_is_shared():
    reset_default_registry()
    seen = []

    def load():
        seen.append(get_default_registry())

    threads = [threading.Thread(target=load) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(seen) == 8
    assert all(registry is seen[0] for registry in seen)
    assert RelationResolver().registry is seen[0]

    reset_default_registry()
    assert get_default_registry() is not seen[0]


def test_tree_with_empty_constituent(resolver):
    np = tree("(NP (NN 书) (ETC 等) (NP ))")

    resolution = resolver.resolve(np)
    assert resolution.short_name == "etc"
    assert resolution.target_position == (1,)
    assert [r.short_name for r in resolver.resolve_tree(np)] == ["etc"]
