"""Build the nested translation catalog persisted next to rewritten sources."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from i18n_core.text.values import collapse_newlines as _collapse
from i18n_core.utils.errors import CatalogConflictError


def nest_text_map(text_map: Mapping[str, str], collapse_newlines: bool = True) -> dict[str, Any]:
    """Expand dotted keys into nested dictionaries.

    ``{"app.title": "Hi"}`` becomes ``{"app": {"title": "Hi"}}``. Line breaks
    and the spaces around them collapse to one space when ``collapse_newlines``
    is set.

    Raises:
        CatalogConflictError: a key is both a leaf and a branch.
    """

    catalog: dict[str, Any] = {}
    for key, value in text_map.items():
        parts = key.split(".")
        node = catalog
        for depth, part in enumerate(parts[:-1]):
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise CatalogConflictError(
                    f"Key '{key}' nests under '{'.'.join(parts[: depth + 1])}', which holds text",
                    key=key,
                )
            node = child
        leaf = parts[-1]
        if isinstance(node.get(leaf), dict):
            raise CatalogConflictError(f"Key '{key}' holds text but already has nested keys", key=key)
        node[leaf] = _collapse(value) if collapse_newlines else value
    return catalog

