from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence
from typing import Iterable, Iterator, Optional

from .tokens import TokenTree

__all__ = [
    "MODE_CASCADE",
    "MODE_DISTINCT",
    "MODES",
    "ShapeMismatchError",
    "build_token_tree",
    "cascading_translate",
    "check_pair_lengths",
    "coerce_text_array",
    "distinct_translate",
    "iter_patterns",
    "resolve_mode",
    "set_debug_logging",
    "translate",
]

MODE_DISTINCT = "distinct"
MODE_CASCADE = "cascade"
MODES = (MODE_DISTINCT, MODE_CASCADE)

TextArray = Iterable[Optional[str]]

_DEBUG_LOG = False


def set_debug_logging(enabled: bool) -> None:
    global _DEBUG_LOG
    _DEBUG_LOG = enabled


def _debug_log(message: str) -> None:
    if _DEBUG_LOG:
        print(f"[strtranslate debug] {message}", file=sys.stderr)


class ShapeMismatchError(ValueError):
    """Raised when paired text arrays are not one-dimensional or differ in length."""


def coerce_text_array(values: TextArray | None, name: str = "array") -> list[str | None]:
    """
    Normalise a one-dimensional sequence of nullable strings into a list.

    ``None`` stands for an absent array and yields an empty list. A bare
    string is a scalar, not an array, and nested sequences make the input
    higher-dimensional; both raise :class:`ShapeMismatchError`.
    """
    if values is None:
        return []
    if isinstance(values, (str, bytes, bytearray)):
        raise ShapeMismatchError(f"{name} must be a one-dimensional array, got a scalar string.")
    if isinstance(values, Mapping):
        raise ShapeMismatchError(f"{name} must be a one-dimensional array, got a mapping.")
    result: list[str | None] = []
    for index, item in enumerate(values):
        if item is None or isinstance(item, str):
            result.append(item)
        elif isinstance(item, Iterable) and not isinstance(item, (bytes, bytearray)):
            raise ShapeMismatchError(f"{name} must be a one-dimensional array (nested value at index {index}).")
        else:
            raise TypeError(f"{name}[{index}] must be a string or None, got {type(item).__name__}.")
    return result


def check_pair_lengths(search_count: int, replacement_count: int) -> None:
    if search_count != replacement_count:
        raise ShapeMismatchError(
            f"mismatched array lengths: {search_count} searches, "
            f"{replacement_count} replacements"
        )


def _coerce_pairs(
    searches: TextArray | None,
    replacements: TextArray | None,
) -> tuple[list[str | None], list[str | None]]:
    search_list = coerce_text_array(searches, "searches")
    replacement_list = coerce_text_array(replacements, "replacements")
    check_pair_lengths(len(search_list), len(replacement_list))
    return search_list, replacement_list


def iter_patterns(
    searches: Sequence[str | None],
    replacements: Sequence[str | None],
) -> Iterator[tuple[str, str]]:
    """Yield the usable ``(search, replacement)`` pairs in order.

    Pairs with a null member or an empty search term are skipped. Arrays of
    different lengths raise :class:`ShapeMismatchError` before anything is
    yielded.
    """
    check_pair_lengths(len(searches), len(replacements))
    return _iter_usable_pairs(searches, replacements)


def _iter_usable_pairs(
    searches: Sequence[str | None],
    replacements: Sequence[str | None],
) -> Iterator[tuple[str, str]]:
    for index, (search, replacement) in enumerate(zip(searches, replacements)):
        if search is None or replacement is None:
            _debug_log(f"skip pair {index}: null {'search' if search is None else 'replacement'}")
            continue
        if not search:
            _debug_log(f"skip pair {index}: empty search")
            continue
        yield search, replacement


def distinct_translate(
    text: str,
    searches: TextArray | None,
    replacements: TextArray | None,
) -> str:
    """
    Replace each search term with its replacement without re-scanning output.

    Pairs are applied in order against the text that earlier pairs left
    untouched. Replacement text is never matched by a later pair, and each
    span of the input is consumed by at most one pair.
    """
    search_list, replacement_list = _coerce_pairs(searches, replacements)
    if not text or not search_list:
        return text
    return build_token_tree(text, search_list, replacement_list).compose()


def build_token_tree(
    text: str,
    searches: TextArray | None,
    replacements: TextArray | None,
) -> TokenTree:
    """Apply every usable pair to a fresh tree and return it uncomposed."""
    search_list, replacement_list = _coerce_pairs(searches, replacements)
    tree = TokenTree(text)
    if not text:
        return tree
    for search, replacement in iter_patterns(search_list, replacement_list):
        hits = tree.apply(search, replacement)
        _debug_log(f"distinct {search!r} -> {replacement!r}: {hits} hit(s)")
    if _DEBUG_LOG:
        _debug_log(f"composing {tree.leaf_count()} leaves")
    return tree


def _replace_all(text: str, search: str, replacement: str) -> tuple[str, int]:
    parts: list[str] = []
    run = 0
    hits = 0
    step = len(search)
    pos = text.find(search)
    while pos >= 0:
        parts.append(text[run:pos])
        parts.append(replacement)
        hits += 1
        run = pos + step
        pos = text.find(search, run)
    if not hits:
        return text, 0
    parts.append(text[run:])
    return "".join(parts), hits


def cascading_translate(
    text: str,
    searches: TextArray | None,
    replacements: TextArray | None,
) -> str:
    """Apply each pair to the result of all earlier pairs."""
    search_list, replacement_list = _coerce_pairs(searches, replacements)
    if not text or not search_list:
        return text
    current = text
    for search, replacement in iter_patterns(search_list, replacement_list):
        current, hits = _replace_all(current, search, replacement)
        _debug_log(f"cascade {search!r} -> {replacement!r}: {hits} hit(s)")
    return current


def resolve_mode(mode: str | None) -> str:
    if mode is None:
        return MODE_DISTINCT
    normalized = mode.strip().lower()
    if normalized not in MODES:
        raise ValueError(f"Unknown translate mode {mode!r}; expected one of: {', '.join(MODES)}.")
    return normalized


def translate(
    text: str,
    searches: TextArray | None,
    replacements: TextArray | None,
    *,
    cascade: bool = False,
) -> str:
    if cascade:
        return cascading_translate(text, searches, replacements)
    return distinct_translate(text, searches, replacements)
