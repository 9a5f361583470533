from .arrays import remove_matching
from .core import (
    MODE_CASCADE,
    MODE_DISTINCT,
    ShapeMismatchError,
    cascading_translate,
    distinct_translate,
    set_debug_logging,
    translate,
)
from .rules import RuleSet, TranslateRule, load_rules
from .tokens import TokenTree

__all__ = [
    "distinct_translate",
    "cascading_translate",
    "translate",
    "remove_matching",
    "ShapeMismatchError",
    "MODE_DISTINCT",
    "MODE_CASCADE",
    "TokenTree",
    "RuleSet",
    "TranslateRule",
    "load_rules",
    "set_debug_logging",
]
