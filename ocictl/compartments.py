"""Compartment tree traversal."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Optional

import oci

from .errors import remote_call
from .helpers import list_all

logger = logging.getLogger(__name__)

Visitor = Callable[[Any, int], None]


def list_child_compartments(
    identity: oci.identity.IdentityClient,
    parent_id: str,
    lifecycle_state: Optional[str] = None,
) -> list[Any]:
    """Direct children of *parent_id*, all pages concatenated in server order."""
    kwargs: dict[str, Any] = {}
    if lifecycle_state:
        kwargs["lifecycle_state"] = lifecycle_state
    with remote_call(f"listing compartments under {parent_id}"):
        return list_all(identity.list_compartments, parent_id, **kwargs)


def iter_compartment_tree(
    identity: oci.identity.IdentityClient,
    root_id: str,
    lifecycle_state: Optional[str] = None,
) -> Iterator[tuple[Any, int]]:
    """Yield ``(compartment, depth)`` depth-first in pre-order.

    Children of *root_id* have depth 0. A worklist replaces recursion, and
    a compartment OCID seen twice is yielded only once.
    """
    seen: set[str] = set()
    pending = [(c, 0) for c in reversed(list_child_compartments(identity, root_id, lifecycle_state))]
    while pending:
        compartment, depth = pending.pop()
        if compartment.id in seen:
            logger.debug("Skipping already visited compartment %s", compartment.id)
            continue
        seen.add(compartment.id)
        yield compartment, depth

        children = list_child_compartments(identity, compartment.id, lifecycle_state)
        pending.extend((child, depth + 1) for child in reversed(children))


def walk_compartments(
    identity: oci.identity.IdentityClient,
    root_id: str,
    visit: Visitor,
    lifecycle_state: Optional[str] = None,
) -> int:
    """Call ``visit(compartment, depth)`` for every compartment under *root_id*.

    Any failed request aborts the walk. Returns the number of compartments
    visited.
    """
    count = 0
    for compartment, depth in iter_compartment_tree(identity, root_id, lifecycle_state):
        visit(compartment, depth)
        count += 1
    logger.debug("Visited %d compartment(s) under %s", count, root_id)
    return count
