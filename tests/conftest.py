"""Shared pytest fixtures — fake OCI clients and paginated list calls."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable, Optional
from unittest.mock import MagicMock

import oci
import pytest

TENANCY = "ocid1.tenancy.oc1..root"


def page_response(data: list[Any], next_page: Optional[str] = None) -> oci.response.Response:
    """A list-call response as the SDK pager sees it."""
    headers = {"opc-next-page": next_page} if next_page else {}
    return oci.response.Response(200, headers, data, None)


def _serve(items: list[Any], page_size: int, page: Optional[str], limit: Optional[int]) -> oci.response.Response:
    # the page token is the offset of the next item; a requested limit shrinks the page
    start = int(page) if page else 0
    size = min(page_size, limit) if limit else page_size
    chunk = items[start : start + size]
    end = start + len(chunk)
    return page_response(chunk, str(end) if end < len(items) else None)


@pytest.fixture
def paged() -> Callable[..., MagicMock]:
    """Build a fake list call returning *items* split into pages of *page_size*."""

    def factory(items: list[Any], page_size: int = 100) -> MagicMock:
        def list_call(*_args: Any, page: Optional[str] = None, limit: Optional[int] = None, **_kwargs: Any):
            return _serve(items, page_size, page, limit)

        mock = MagicMock(side_effect=list_call)
        mock.__name__ = "list_call"  # the SDK's retry wrapper reads the function name
        return mock

    return factory


@pytest.fixture
def paged_by_parent() -> Callable[..., MagicMock]:
    """Build a fake list call keyed on its first argument (e.g. a parent compartment)."""

    def factory(mapping: dict[str, list[Any]], page_size: int = 100) -> MagicMock:
        def list_call(parent_id: str, page: Optional[str] = None, limit: Optional[int] = None, **_kwargs: Any):
            return _serve(mapping.get(parent_id, []), page_size, page, limit)

        mock = MagicMock(side_effect=list_call)
        mock.__name__ = "list_call"  # the SDK's retry wrapper reads the function name
        return mock

    return factory


class _NamedMock(MagicMock):
    """MagicMock whose attribute children carry ``__name__``, which the SDK's retry wrapper reads."""

    def _get_child_mock(self, **kwargs: Any) -> MagicMock:
        child = super()._get_child_mock(**kwargs)
        if kwargs.get("name"):
            child.__name__ = kwargs["name"]
        return child


@pytest.fixture
def clients() -> SimpleNamespace:
    """Duck-typed ``OCIClients`` with mocked service clients."""
    return SimpleNamespace(
        profile="TEST",
        tenancy_id=TENANCY,
        compute=_NamedMock(name="compute"),
        identity=_NamedMock(name="identity"),
    )
