"""Compute operations — instance listing and lookup, images, shapes, launch."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

import oci
from rich.markup import escape

from .auth import OCIClients
from .common import print_detail, print_step, print_success
from .errors import InvalidInputError, remote_call
from .helpers import list_all, list_up_to
from .resolver import ResourceKind, compartment_or_tenancy, resolve, validate_shape

logger = logging.getLogger(__name__)

SSH_KEYS_METADATA = "ssh_authorized_keys"

# ---------------------------------------------------------------------------
# Instances
# ---------------------------------------------------------------------------


def list_instances(
    clients: OCIClients,
    compartment_id: str,
    lifecycle_state: Optional[str] = None,
) -> list[oci.core.models.Instance]:
    """List all instances of a compartment."""
    kwargs = {"lifecycle_state": lifecycle_state} if lifecycle_state else {}
    with remote_call(f"listing instances in {compartment_id}"):
        return list_all(clients.compute.list_instances, compartment_id, **kwargs)


def get_instance(clients: OCIClients, instance_id: str) -> oci.core.models.Instance:
    with remote_call(f"getting instance {instance_id}"):
        return clients.compute.get_instance(instance_id).data


def find_instance(clients: OCIClients, name: str, compartment_id: str) -> oci.core.models.Instance:
    """Look up an instance by display name and fetch its full details."""
    return get_instance(clients, resolve(clients, name, ResourceKind.INSTANCE, compartment_id))


# ---------------------------------------------------------------------------
# Images & shapes
# ---------------------------------------------------------------------------


def list_images(
    clients: OCIClients,
    compartment_id: str,
    operating_system: Optional[str] = None,
    limit: int = 50,
) -> list[oci.core.models.Image]:
    """List images visible from a compartment, newest first."""
    kwargs = {"operating_system": operating_system} if operating_system else {}
    with remote_call("listing images"):
        return list_up_to(
            clients.compute.list_images,
            limit,
            compartment_id,
            sort_by="TIMECREATED",
            sort_order="DESC",
            **kwargs,
        )


def list_shapes(
    clients: OCIClients,
    compartment_id: str,
    image_id: Optional[str] = None,
    limit: int = 100,
) -> list[oci.core.models.Shape]:
    """List shapes available in a compartment, optionally for one image."""
    kwargs = {"image_id": image_id} if image_id else {}
    with remote_call("listing shapes"):
        return list_up_to(clients.compute.list_shapes, limit, compartment_id, **kwargs)


# ---------------------------------------------------------------------------
# Launch
# ---------------------------------------------------------------------------


@dataclass
class LaunchRequest:
    """User input for a launch; names are resolved by :func:`launch_instance`."""

    shape_name: str
    image: str
    subnet_id: str
    availability_domain: str
    compartment: str = ""
    display_name: str = ""
    public_keys: str = ""
    ssh_key_files: Sequence[Path] = field(default_factory=tuple)
    ocpus: float = 0.0
    memory_in_gbs: float = 0.0


def pack_ssh_keys(public_keys: str, key_files: Sequence[Path] = ()) -> str:
    """Join SSH public keys into one newline-delimited metadata value.

    *public_keys* is a comma-separated list; each key file may hold several
    keys, one per line. Blank entries are dropped.
    """
    keys = re.split(r"[,\n]", public_keys or "")
    for path in key_files:
        try:
            keys.extend(Path(path).expanduser().read_text().splitlines())
        except OSError as exc:
            raise InvalidInputError(f"Cannot read SSH key file {path}: {exc.strerror or exc}") from exc
    packed = "\n".join(k.strip() for k in keys if k.strip())
    if not packed:
        raise InvalidInputError("No valid public SSH keys provided")
    return packed


def default_display_name(now: Optional[datetime] = None) -> str:
    return f"instance-{(now or datetime.now()).strftime('%Y%m%d-%H%M')}"


def build_launch_details(
    *,
    compartment_id: str,
    image_id: str,
    shape_name: str,
    subnet_id: str,
    availability_domain: str,
    display_name: str,
    ssh_keys: str,
    ocpus: float = 0.0,
    memory_in_gbs: float = 0.0,
) -> oci.core.models.LaunchInstanceDetails:
    details = oci.core.models.LaunchInstanceDetails(
        availability_domain=availability_domain,
        compartment_id=compartment_id,
        display_name=display_name,
        shape=shape_name,
        create_vnic_details=oci.core.models.CreateVnicDetails(subnet_id=subnet_id),
        source_details=oci.core.models.InstanceSourceViaImageDetails(image_id=image_id),
        metadata={SSH_KEYS_METADATA: ssh_keys},
    )
    # Flex shapes only; unset values keep the service defaults
    if ocpus or memory_in_gbs:
        details.shape_config = oci.core.models.LaunchInstanceShapeConfigDetails(
            ocpus=ocpus or None,
            memory_in_gbs=memory_in_gbs or None,
        )
    return details


def launch_instance(clients: OCIClients, req: LaunchRequest) -> oci.core.models.Instance:
    """Resolve the request's names and submit a single launch call.

    Returns the instance as reported right after submission (usually
    PROVISIONING); the call does not wait for it to run.
    """
    ssh_keys = pack_ssh_keys(req.public_keys, req.ssh_key_files)
    if not req.subnet_id or not req.availability_domain:
        raise InvalidInputError("Both a subnet OCID and an availability domain are required")

    compartment_id = compartment_or_tenancy(clients, req.compartment)
    print_detail(f"Compartment: {compartment_id}")

    image_id = resolve(clients, req.image, ResourceKind.IMAGE, compartment_id)
    print_detail(f"Image:       {image_id}")

    shape_name = validate_shape(clients, req.shape_name, compartment_id, image_id)
    print_detail(f"Shape:       {shape_name}")

    display_name = req.display_name or default_display_name()
    print_detail(f"Name:        {escape(display_name)}")

    details = build_launch_details(
        compartment_id=compartment_id,
        image_id=image_id,
        shape_name=shape_name,
        subnet_id=req.subnet_id,
        availability_domain=req.availability_domain,
        display_name=display_name,
        ssh_keys=ssh_keys,
        ocpus=req.ocpus,
        memory_in_gbs=req.memory_in_gbs,
    )

    print_step("Launching instance...")
    logger.info("Launching %s (%s) in %s", display_name, shape_name, compartment_id)
    with remote_call("launching instance"):
        instance = clients.compute.launch_instance(details).data
    print_success(f"Instance launch initiated: {instance.id}")
    return instance
