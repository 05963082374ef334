"""Identifier resolution — turn user-supplied names into OCIDs.

A value that already looks like an OCID of the requested kind is returned
untouched without any API call. Anything else is treated as a display name
and matched exactly (case-sensitive) against the full listing of its scope.
When several resources share the name, the first one in API response order
is used and a warning is printed.

:func:`resolve` is the entry point for every name-or-OCID input; the
per-kind functions hold the lookup rules.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, Optional, Sequence

from rich.markup import escape

from .auth import OCIClients
from .common import print_info, print_warning
from .errors import InvalidInputError, NotFoundError, remote_call
from .helpers import list_all

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    COMPARTMENT = "compartment"
    IMAGE = "image"
    INSTANCE = "instance"


# OCID resource types accepted as a literal for each kind
_OCID_TYPES: dict[ResourceKind, tuple[str, ...]] = {
    ResourceKind.COMPARTMENT: ("compartment", "tenancy"),
    ResourceKind.IMAGE: ("image",),
    ResourceKind.INSTANCE: ("instance",),
}

# ocid1.<type>.<realm>.[region].<unique id>
_OCID_RE = re.compile(r"^ocid1\.(?P<type>[a-z0-9]+)\.(?P<realm>[a-z0-9]+)\.")


def is_ocid(value: str, kind: ResourceKind) -> bool:
    """Return True if *value* has the literal OCID format for *kind*."""
    m = _OCID_RE.match(value)
    return bool(m) and m.group("type") in _OCID_TYPES[kind]


def _require(value: Optional[str], kind: ResourceKind) -> str:
    if value is None or not value.strip():
        raise InvalidInputError(f"A {kind.value} name or OCID is required")
    return value


def _first_match(
    items: Sequence[Any], name: str, kind: ResourceKind, scope: str, attr: str = "display_name"
) -> Optional[Any]:
    matches = [item for item in items if getattr(item, attr, None) == name]
    if not matches:
        return None
    if len(matches) > 1:
        print_warning(
            f"{len(matches)} {kind.value}s named '{escape(name)}' found in {scope}; "
            f"using the first one ({matches[0].id})."
        )
    logger.debug("Resolved %s '%s' -> %s", kind.value, name, matches[0].id)
    return matches[0]


# ---------------------------------------------------------------------------
# Compartments
# ---------------------------------------------------------------------------


def resolve_compartment_id(clients: OCIClients, value: str) -> str:
    """Resolve a compartment name (or OCID) among the tenancy root's direct children.

    Names are unique only among siblings, so nested compartments are not
    searched.
    """
    value = _require(value, ResourceKind.COMPARTMENT)
    if is_ocid(value, ResourceKind.COMPARTMENT):
        return value

    tenancy_id = clients.tenancy_id
    with remote_call("listing compartments"):
        compartments = list_all(clients.identity.list_compartments, tenancy_id)
    match = _first_match(compartments, value, ResourceKind.COMPARTMENT, "the tenancy root", attr="name")
    if match is None:
        raise NotFoundError(f"Compartment '{value}' not found in tenancy root {tenancy_id}")
    return match.id


def compartment_or_tenancy(clients: OCIClients, value: Optional[str]) -> str:
    """Resolve *value* if given, otherwise fall back to the tenancy root."""
    if value:
        return resolve(clients, value, ResourceKind.COMPARTMENT)
    return clients.tenancy_id


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


def _images_named(clients: OCIClients, name: str, compartment_id: str) -> list[Any]:
    with remote_call(f"listing images in {compartment_id}"):
        images = list_all(
            clients.compute.list_images,
            compartment_id,
            display_name=name,
        )
    return [i for i in images if i.display_name == name]


def resolve_image_id(clients: OCIClients, name: str, compartment_id: str) -> str:
    """Resolve an image display name to its OCID.

    Images owned by *compartment_id* are searched first; when none match,
    the tenancy root is searched, which also returns the platform images.
    """
    name = _require(name, ResourceKind.IMAGE)
    if is_ocid(name, ResourceKind.IMAGE):
        return name

    scope = f"compartment {compartment_id}"
    match = _first_match(_images_named(clients, name, compartment_id), name, ResourceKind.IMAGE, scope)
    if match is not None:
        return match.id

    tenancy_id = clients.tenancy_id
    if compartment_id != tenancy_id:
        print_info(f"Image '{escape(name)}' not found in {scope}, checking platform images...")
        match = _first_match(
            _images_named(clients, name, tenancy_id),
            name,
            ResourceKind.IMAGE,
            "platform images",
        )
        if match is not None:
            return match.id

    raise NotFoundError(
        f"No image named '{name}' in compartment {compartment_id} "
        f"or platform images (tenancy {tenancy_id})"
    )


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------


def validate_shape(clients: OCIClients, shape_name: str, compartment_id: str, image_id: str) -> str:
    """Check that *shape_name* is offered for *image_id*; returns the name.

    Shapes are addressed by name in launch requests, so this only confirms
    existence.
    """
    if not shape_name or not shape_name.strip():
        raise InvalidInputError("A shape name is required")
    with remote_call("listing shapes"):
        shapes = list_all(
            clients.compute.list_shapes,
            compartment_id,
            image_id=image_id,
        )
    if any(s.shape == shape_name for s in shapes):
        return shape_name
    raise NotFoundError(
        f"No shape named '{shape_name}' compatible with image {image_id} "
        f"in compartment {compartment_id}"
    )


# ---------------------------------------------------------------------------
# Instances
# ---------------------------------------------------------------------------


def resolve_instance_id(clients: OCIClients, name: str, compartment_id: str) -> str:
    """Resolve an instance display name within one compartment."""
    name = _require(name, ResourceKind.INSTANCE)
    if is_ocid(name, ResourceKind.INSTANCE):
        return name
    with remote_call("listing instances"):
        instances = list_all(clients.compute.list_instances, compartment_id)
    match = _first_match(instances, name, ResourceKind.INSTANCE, f"compartment {compartment_id}")
    if match is None:
        raise NotFoundError(f"No instance named '{name}' in compartment {compartment_id}")
    return match.id


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


def resolve(
    clients: OCIClients,
    value: str,
    kind: ResourceKind,
    scope: Optional[str] = None,
) -> str:
    """Resolve *value* of *kind* to an OCID.

    *scope* is the compartment searched for images and instances; it
    defaults to the tenancy root and is ignored for compartments.
    """
    value = _require(value, kind)
    if kind is ResourceKind.COMPARTMENT:
        return resolve_compartment_id(clients, value)
    if is_ocid(value, kind):
        return value
    scope = scope or clients.tenancy_id
    if kind is ResourceKind.IMAGE:
        return resolve_image_id(clients, value, scope)
    return resolve_instance_id(clients, value, scope)
