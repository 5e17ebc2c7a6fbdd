"""Universal Chinese grammatical relations.

This package assigns typed grammatical (dependency) relations to nodes of
Penn Chinese Treebank style constituency trees.

The pieces:
1. A relation table (YAML) lists relations in priority order, each with a
   parent, a head-label expression and ordered tree patterns
2. RelationRegistry validates the table into a single-rooted hierarchy and
   compiles every pattern once
3. RelationResolver finds, at a tree node, the first relation whose pattern
   matches and the dependent node that pattern binds
"""

__version__ = "1.0.0"

from .errors import (
    DuplicateRelationName,
    InvalidHierarchy,
    MissingRoot,
    PatternCompilationFailure,
    RelationError,
    UnknownRelation,
)
from .matching import PatternCompiler, TreeMatcher
from .registry import RelationRegistry, get_default_registry, reset_default_registry
from .relation import GrammaticalRelation, RelationDefinition
from .resolver import RelationResolver, Resolution
from .table import LANGUAGE_SPECIFIC, load_definitions, save_definitions
from .trees import TreeContext
from .tregex import TregexCompiler, TregexParseError, TregexPattern

__all__ = [
    # Relations and registry
    "GrammaticalRelation",
    "RelationDefinition",
    "RelationRegistry",
    "get_default_registry",
    "reset_default_registry",
    "LANGUAGE_SPECIFIC",
    "load_definitions",
    "save_definitions",
    # Resolution
    "RelationResolver",
    "Resolution",
    "TreeContext",
    # Matching
    "PatternCompiler",
    "TreeMatcher",
    "TregexCompiler",
    "TregexPattern",
    "TregexParseError",
    # Errors
    "RelationError",
    "DuplicateRelationName",
    "MissingRoot",
    "InvalidHierarchy",
    "UnknownRelation",
    "PatternCompilationFailure",
]
