"""Rendering of SDK models — tables, detail blocks and the compartment tree."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from .common import console, print_detail, print_info

_STATE_STYLES = {
    "RUNNING": "green",
    "AVAILABLE": "green",
    "ACTIVE": "green",
    "STOPPED": "yellow",
    "PROVISIONING": "yellow",
    "STARTING": "yellow",
    "STOPPING": "yellow",
    "TERMINATED": "red",
    "TERMINATING": "red",
    "DELETED": "red",
}


def _text(value: Any, default: str = "-") -> str:
    if value is None or value == "":
        return default
    return escape(str(value))


def _state(state: Optional[str]) -> str:
    style = _STATE_STYLES.get(state or "", "white")
    return f"[{style}]{_text(state)}[/{style}]"


def _range(low: Any, high: Any, default: Any = None) -> str:
    if low is None or high is None:
        return "-"
    text = f"{low:g}–{high:g}"
    if default is not None:
        text += f" (default {default:g}/OCPU)"
    return text


# ---------------------------------------------------------------------------
# Instances
# ---------------------------------------------------------------------------


def print_instances(instances: Sequence[Any], compartment_id: str) -> None:
    if not instances:
        print_info(f"No instances found in {compartment_id}.")
        return
    table = Table(title=f"Instances ({len(instances)})", show_lines=False)
    table.add_column("Name")
    table.add_column("State", style="bold")
    table.add_column("Shape")
    table.add_column("Availability Domain")
    table.add_column("OCID", style="cyan", overflow="fold")
    for i in instances:
        table.add_row(
            _text(i.display_name, "(unnamed)"),
            _state(i.lifecycle_state),
            _text(i.shape),
            _text(i.availability_domain),
            _text(i.id),
        )
    console.print(table)


def print_instance_details(instance: Any) -> None:
    console.print("[bold]Instance Details:[/bold]")
    print_detail(f"ID:                  {_text(instance.id)}")
    print_detail(f"Display Name:        {_text(instance.display_name)}")
    print_detail(f"State:               {_state(instance.lifecycle_state)}")
    print_detail(f"Shape:               {_text(instance.shape)}")
    shape_config = getattr(instance, "shape_config", None)
    if shape_config is not None:
        print_detail(
            f"  OCPUs / Memory:    {_text(shape_config.ocpus)} / {_text(shape_config.memory_in_gbs)} GB"
        )
    print_detail(f"Image ID:            {_text(instance.image_id)}")
    print_detail(f"Compartment ID:      {_text(instance.compartment_id)}")
    print_detail(f"Availability Domain: {_text(instance.availability_domain)}")
    print_detail(f"Fault Domain:        {_text(instance.fault_domain)}")
    print_detail(f"Region:              {_text(getattr(instance, 'region', None))}")
    created = getattr(instance, "time_created", None)
    if created is not None:
        print_detail(f"Created:             {created:%Y-%m-%d %H:%M:%S %Z}")


# ---------------------------------------------------------------------------
# Images & shapes
# ---------------------------------------------------------------------------


def print_images(images: Sequence[Any]) -> None:
    if not images:
        print_info("No images found matching the criteria.")
        return
    table = Table(title=f"Images ({len(images)})")
    table.add_column("Display Name")
    table.add_column("OS")
    table.add_column("State")
    table.add_column("OCID", style="cyan", overflow="fold")
    table.add_column("Base Image", overflow="fold")
    for img in images:
        os_name = img.operating_system or ""
        if getattr(img, "operating_system_version", None):
            os_name = f"{os_name} {img.operating_system_version}"
        table.add_row(
            _text(img.display_name),
            _text(os_name),
            _state(img.lifecycle_state),
            _text(img.id),
            _text(img.base_image_id),
        )
    console.print(table)


def print_shapes(shapes: Sequence[Any]) -> None:
    if not shapes:
        print_info("No shapes found matching the criteria.")
        return
    table = Table(title=f"Shapes ({len(shapes)})")
    table.add_column("Shape", style="cyan")
    table.add_column("Processor")
    table.add_column("OCPUs")
    table.add_column("Memory (GB)")
    table.add_column("Network (Gbps)")
    for s in shapes:
        ocpu = s.ocpu_options
        mem = s.memory_options
        net = s.networking_bandwidth_options
        table.add_row(
            _text(s.shape),
            _text(s.processor_description),
            _range(ocpu.min, ocpu.max) if ocpu else _text(s.ocpus),
            _range(mem.min_in_g_bs, mem.max_in_g_bs, mem.default_per_ocpu_in_g_bs)
            if mem
            else _text(s.memory_in_gbs),
            _range(net.min_in_gbps, net.max_in_gbps, net.default_per_ocpu_in_gbps)
            if net
            else _text(s.networking_bandwidth_in_gbps),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Compartments
# ---------------------------------------------------------------------------


class CompartmentTreeBuilder:
    """Visitor that assembles a :class:`rich.tree.Tree` from a pre-order walk."""

    def __init__(self, root_label: str):
        self.tree = Tree(f"[bold]{escape(root_label)}[/bold]")
        self._levels: list[Tree] = []

    def __call__(self, compartment: Any, depth: int) -> None:
        parent = self.tree if depth == 0 else self._levels[depth - 1]
        label = f"{_text(compartment.name)} [dim]{_text(compartment.id)}[/dim]"
        if compartment.lifecycle_state and compartment.lifecycle_state != "ACTIVE":
            label += f" {_state(compartment.lifecycle_state)}"
        if compartment.description:
            label += f"\n[italic]{_text(compartment.description)}[/italic]"
        branch = parent.add(label)
        del self._levels[depth:]
        self._levels.append(branch)
