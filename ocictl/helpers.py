"""Pagination helpers for OCI SDK list calls."""

from __future__ import annotations

import logging
from typing import Any, Callable

import oci

logger = logging.getLogger(__name__)

# largest page most list endpoints accept
MAX_PAGE_SIZE = 100


def list_all(list_func: Callable[..., Any], *args: Any, **kwargs: Any) -> list[Any]:
    """Every item of a paginated list call, all pages concatenated in server order."""
    resp = oci.pagination.list_call_get_all_results(list_func, *args, **kwargs)
    logger.debug("%s: %d item(s)", _name(list_func), len(resp.data))
    return resp.data


def list_up_to(list_func: Callable[..., Any], limit: int, *args: Any, **kwargs: Any) -> list[Any]:
    """At most *limit* items of a paginated list call; no page is fetched past the limit."""
    resp = oci.pagination.list_call_get_up_to_limit(
        list_func,
        limit,
        min(limit, MAX_PAGE_SIZE),
        *args,
        **kwargs,
    )
    logger.debug("%s: %d item(s) (limit %d)", _name(list_func), len(resp.data), limit)
    return resp.data[:limit]


def _name(func: Callable[..., Any]) -> str:
    return getattr(func, "__name__", repr(func))
