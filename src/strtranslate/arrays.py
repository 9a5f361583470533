from __future__ import annotations

from .core import TextArray, coerce_text_array

__all__ = ["remove_matching"]


def remove_matching(
    source: TextArray | None,
    removals: TextArray | None,
) -> list[str | None]:
    """
    Drop every source element that exactly equals a non-null removal value.

    Order is preserved and null source elements always pass through. When
    either array is absent or empty the source comes back unchanged.
    """
    source_list = coerce_text_array(source, "source")
    removal_list = coerce_text_array(removals, "removals")
    if not source_list or not removal_list:
        return source_list
    blocked = {value for value in removal_list if value is not None}
    return [item for item in source_list if item is None or item not in blocked]
