# ocictl CLI — main entry point
"""ocictl CLI — inspect and launch OCI compute instances from the terminal."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import click
from rich.markup import escape

from ..auth import OCIClients
from ..common import die, init_logging, print_step
from ..config import settings
from ..errors import InvalidInputError, OcictlError

logger = logging.getLogger("ocictl.cli")


class CliState:
    """Per-invocation state stored on the click context.

    The profile may be changed by a leaf command's ``--profile`` until the
    first client is built.
    """

    def __init__(self, profile: str, config_file: Path):
        self.profile = profile
        self.config_file = config_file
        self._clients: Optional[OCIClients] = None

    @property
    def clients(self) -> OCIClients:
        if self._clients is None:
            self._clients = OCIClients(self.profile, self.config_file)
        return self._clients


class _ErrorHandlingGroup(click.Group):
    """Turn :class:`OcictlError` raised by any subcommand into a message and exit status."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except OcictlError as exc:
            logger.debug("Command failed", exc_info=True)
            die(escape(str(exc)), exc.exit_code)


def _set_profile(ctx: click.Context, _param: click.Parameter, value: Optional[str]) -> None:
    state = ctx.find_object(CliState)
    if value and state is not None:
        state.profile = value


profile_option = click.option(
    "--profile",
    default=None,
    expose_value=False,
    callback=_set_profile,
    help="OCI config profile (overrides the global --profile).",
)


def _state(ctx: click.Context) -> CliState:
    logger.debug("Executing command: %s", ctx.command_path)
    return ctx.find_object(CliState)


@click.group(cls=_ErrorHandlingGroup)
@click.version_option(version=settings.app_version, prog_name=settings.app_name)
@click.option("--profile", default=settings.profile, show_default=True, help="OCI config profile to use.")
@click.option(
    "--config-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=settings.oci_config_file,
    help="OCI config file.",
)
@click.option("--debug", is_flag=True, default=settings.debug, help="Log debug output to stderr.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=settings.log_file,
    help="Write a debug log to this file.",
)
@click.pass_context
def cli(ctx: click.Context, profile: str, config_file: Path, debug: bool, log_file: Optional[Path]) -> None:
    """ocictl — OCI compute and identity from the command line."""
    init_logging(debug=debug, log_file=log_file)
    ctx.obj = CliState(profile, config_file)


# ---------------------------------------------------------------------------
# Instance commands
# ---------------------------------------------------------------------------


@cli.group()
def instances() -> None:
    """Manage compute instances."""


@instances.command("list")
@click.option("--compartment-id", default="", help="OCID or name of the compartment (default: tenancy root).")
@click.option("--tenancy", is_flag=True, help="List instances of the tenancy root (ignores --compartment-id).")
@click.option("--lifecycle-state", default=None, help="Only instances in this state, e.g. RUNNING.")
@profile_option
@click.pass_context
def instances_list(ctx: click.Context, compartment_id: str, tenancy: bool, lifecycle_state: Optional[str]) -> None:
    """List instances in a compartment or the tenancy."""
    from ..compute import list_instances
    from ..display import print_instances
    from ..resolver import compartment_or_tenancy

    clients = _state(ctx).clients
    target = clients.tenancy_id if tenancy else compartment_or_tenancy(clients, compartment_id)
    items = list_instances(clients, target, lifecycle_state=lifecycle_state)
    print_instances(items, target)


@instances.command("create")
@click.option("--name", default="", help="Display name (default: instance-YYYYMMDD-HHMM).")
@click.option("--compartment-id", default="", help="OCID or name of the compartment (default: tenancy root).")
@click.option("--shape-name", required=True, help="Shape, e.g. VM.Standard.A1.Flex.")
@click.option("--image-name", required=True, help="Image display name or OCID.")
@click.option("--subnet-id", required=True, help="OCID of the subnet for the primary VNIC.")
@click.option("--availability-domain", required=True, help="Availability domain, e.g. Uocm:US-ASHBURN-AD-1.")
@click.option("--public-keys", default="", help="Comma-separated SSH public keys.")
@click.option(
    "--ssh-key-file",
    "ssh_key_files",
    multiple=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="SSH public key file (repeatable).",
)
@click.option("--ocpus", type=float, default=0.0, help="OCPUs (flexible shapes).")
@click.option("--memory-in-gbs", type=float, default=0.0, help="Memory in GB (flexible shapes).")
@profile_option
@click.pass_context
def instances_create(
    ctx: click.Context,
    name: str,
    compartment_id: str,
    shape_name: str,
    image_name: str,
    subnet_id: str,
    availability_domain: str,
    public_keys: str,
    ssh_key_files: tuple[Path, ...],
    ocpus: float,
    memory_in_gbs: float,
) -> None:
    """Launch a new compute instance.

    \b
    Examples:
        ocictl instances create --shape-name VM.Standard.A1.Flex \\
            --image-name "Canonical-Ubuntu-24.04-Minimal-aarch64-2025.01.31-0" \\
            --subnet-id ocid1.subnet... --availability-domain Uocm:US-ASHBURN-AD-1 \\
            --ssh-key-file ~/.ssh/id_ed25519.pub --ocpus 2 --memory-in-gbs 12
    """
    from ..common import print_detail, print_info
    from ..compute import LaunchRequest, launch_instance

    if ocpus < 0 or memory_in_gbs < 0:
        raise InvalidInputError("--ocpus and --memory-in-gbs must not be negative")

    req = LaunchRequest(
        shape_name=shape_name,
        image=image_name,
        subnet_id=subnet_id,
        availability_domain=availability_domain,
        compartment=compartment_id,
        display_name=name,
        public_keys=public_keys,
        ssh_key_files=ssh_key_files,
        ocpus=ocpus,
        memory_in_gbs=memory_in_gbs,
    )
    print_step("Preparing launch...")
    instance = launch_instance(_state(ctx).clients, req)
    print_detail(f"Instance ID: {instance.id}")
    print_detail(f"State:       {instance.lifecycle_state}")
    print_info("Provisioning takes a few minutes. Use 'ocictl instances info' to check status.")


@instances.command("info")
@click.option("--id", "instance_id", default="", help="OCID of the instance.")
@click.option("--name", default="", help="Display name of the instance.")
@click.option("--compartment-id", default="", help="OCID or name of the compartment searched by --name.")
@profile_option
@click.pass_context
def instances_info(ctx: click.Context, instance_id: str, name: str, compartment_id: str) -> None:
    """Show one instance, by OCID or display name."""
    from ..compute import find_instance, get_instance
    from ..display import print_instance_details
    from ..resolver import compartment_or_tenancy

    if instance_id and name:
        raise InvalidInputError("Specify either --id or --name, not both.")
    if not instance_id and not name:
        raise InvalidInputError("Specify either --id or --name.")

    clients = _state(ctx).clients
    if instance_id:
        instance = get_instance(clients, instance_id)
    else:
        instance = find_instance(clients, name, compartment_or_tenancy(clients, compartment_id))
    print_instance_details(instance)


@instances.command("list-images")
@click.option("--compartment-id", default="", help="OCID or name of the compartment (default: tenancy root).")
@click.option("--platform", is_flag=True, help="List platform images (ignores --compartment-id).")
@click.option("--os", "operating_system", default=None, help="Filter by operating system, e.g. 'Oracle Linux'.")
@click.option("--limit", type=click.IntRange(min=1), default=50, show_default=True, help="Maximum images shown.")
@profile_option
@click.pass_context
def instances_list_images(
    ctx: click.Context,
    compartment_id: str,
    platform: bool,
    operating_system: Optional[str],
    limit: int,
) -> None:
    """List compute images, custom or platform."""
    from ..compute import list_images
    from ..display import print_images
    from ..resolver import compartment_or_tenancy

    clients = _state(ctx).clients
    if platform:
        target = clients.tenancy_id
        print_step("Listing platform images...")
    else:
        target = compartment_or_tenancy(clients, compartment_id)
        print_step(f"Listing images in {target}...")
    print_images(list_images(clients, target, operating_system=operating_system, limit=limit))


@instances.command("list-shapes")
@click.option("--compartment-id", default="", help="OCID or name of the compartment (default: tenancy root).")
@click.option("--image-id", default="", help="Only shapes compatible with this image (OCID or display name).")
@click.option("--limit", type=click.IntRange(min=1), default=100, show_default=True, help="Maximum shapes shown.")
@profile_option
@click.pass_context
def instances_list_shapes(ctx: click.Context, compartment_id: str, image_id: str, limit: int) -> None:
    """List compute shapes available in a compartment."""
    from ..compute import list_shapes
    from ..display import print_shapes
    from ..resolver import ResourceKind, compartment_or_tenancy, resolve

    clients = _state(ctx).clients
    target = compartment_or_tenancy(clients, compartment_id)
    image = resolve(clients, image_id, ResourceKind.IMAGE, target) if image_id else None
    print_step("Fetching shapes...")
    print_shapes(list_shapes(clients, target, image_id=image, limit=limit))


# ---------------------------------------------------------------------------
# Compartment commands
# ---------------------------------------------------------------------------


@cli.group()
def compartments() -> None:
    """Browse compartments."""


@compartments.command("list")
@click.option("--root", default="", help="OCID or name of the subtree root (default: tenancy root).")
@click.option("--active-only", is_flag=True, help="Skip deleted and deleting compartments.")
@profile_option
@click.pass_context
def compartments_list(ctx: click.Context, root: str, active_only: bool) -> None:
    """Show the compartment hierarchy as a tree."""
    from ..common import console, print_info
    from ..compartments import walk_compartments
    from ..display import CompartmentTreeBuilder
    from ..resolver import compartment_or_tenancy

    clients = _state(ctx).clients
    root_id = compartment_or_tenancy(clients, root)
    builder = CompartmentTreeBuilder(root_id)
    count = walk_compartments(
        clients.identity,
        root_id,
        builder,
        lifecycle_state="ACTIVE" if active_only else None,
    )
    console.print(builder.tree)
    print_info(f"{count} compartment(s)")


if __name__ == "__main__":
    cli()
