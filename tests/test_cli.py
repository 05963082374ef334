"""Tests for the click command tree: routing, flag handling, exit status."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import oci
import pytest
from click.testing import CliRunner

from ocictl import __version__
from ocictl.cli.main import cli
from ocictl.common import console, err_console

KEY = "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIA alice@laptop"


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    # keep table cells and messages on one line
    monkeypatch.setattr(console, "width", 200)
    monkeypatch.setattr(err_console, "width", 200)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def factory(clients):
    """Patch the client factory used by the CLI; returns the factory mock."""
    with patch("ocictl.cli.main.OCIClients", return_value=clients) as mock:
        yield mock


def _instance(**overrides) -> SimpleNamespace:
    fields = dict(
        id="ocid1.instance.oc1..web",
        display_name="web",
        lifecycle_state="RUNNING",
        shape="VM.Standard.E4.Flex",
        shape_config=None,
        image_id="ocid1.image.oc1..img",
        compartment_id="ocid1.compartment.oc1..dev",
        availability_domain="AD-1",
        fault_domain="FAULT-DOMAIN-2",
        region="iad",
        time_created=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_version(runner) -> None:
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


# ── instances list ────────────────────────────────────────────────────────


def test_list_defaults_to_tenancy(runner, factory, clients, paged) -> None:
    clients.compute.list_instances = paged([_instance()])
    result = runner.invoke(cli, ["instances", "list"])

    assert result.exit_code == 0, result.output
    assert "web" in result.output
    assert clients.compute.list_instances.call_args.args == (clients.tenancy_id,)


def test_list_tenancy_flag_ignores_compartment(runner, factory, clients, paged) -> None:
    clients.compute.list_instances = paged([])
    result = runner.invoke(cli, ["instances", "list", "--tenancy", "--compartment-id", "dev"])

    assert result.exit_code == 0, result.output
    assert clients.compute.list_instances.call_args.args == (clients.tenancy_id,)
    clients.identity.list_compartments.assert_not_called()


def test_list_by_compartment_name(runner, factory, clients, paged) -> None:
    clients.identity.list_compartments = paged(
        [SimpleNamespace(id="ocid1.compartment.oc1..dev", name="dev", lifecycle_state="ACTIVE")]
    )
    clients.compute.list_instances = paged([])
    result = runner.invoke(cli, ["instances", "list", "--compartment-id", "dev", "--lifecycle-state", "RUNNING"])

    assert result.exit_code == 0, result.output
    args, kwargs = clients.compute.list_instances.call_args
    assert args == ("ocid1.compartment.oc1..dev",)
    assert kwargs["lifecycle_state"] == "RUNNING"


def test_unknown_compartment_exits_nonzero(runner, factory, clients, paged) -> None:
    clients.identity.list_compartments = paged(
        [SimpleNamespace(id="ocid1.compartment.oc1..dev", name="Dev", lifecycle_state="ACTIVE")]
    )
    result = runner.invoke(cli, ["instances", "list", "--compartment-id", "dev"])

    assert result.exit_code == 1
    assert "Compartment 'dev' not found" in result.output
    clients.compute.list_instances.assert_not_called()


def test_remote_failure_exits_nonzero(runner, factory, clients) -> None:
    clients.compute.list_instances.side_effect = oci.exceptions.ServiceError(
        401, "NotAuthenticated", {"opc-request-id": "req-1"}, "bad key"
    )
    result = runner.invoke(cli, ["instances", "list"])

    assert result.exit_code == 1
    assert "NotAuthenticated" in result.output


# ── profiles ──────────────────────────────────────────────────────────────


def test_global_profile(runner, factory, clients, paged) -> None:
    clients.compute.list_instances = paged([])
    result = runner.invoke(cli, ["--profile", "PROD", "--config-file", "/tmp/oci.cfg", "instances", "list"])

    assert result.exit_code == 0, result.output
    factory.assert_called_once_with("PROD", Path("/tmp/oci.cfg"))


def test_command_profile_overrides_global(runner, factory, clients, paged) -> None:
    clients.compute.list_instances = paged([])
    result = runner.invoke(cli, ["--profile", "PROD", "instances", "list", "--profile", "DEV"])

    assert result.exit_code == 0, result.output
    assert factory.call_args.args[0] == "DEV"


# ── instances info ────────────────────────────────────────────────────────


def test_info_rejects_id_and_name(runner, factory) -> None:
    result = runner.invoke(cli, ["instances", "info", "--id", "ocid1.instance.oc1..x", "--name", "web"])

    assert result.exit_code == 2
    assert "not both" in result.output
    factory.assert_not_called()


def test_info_requires_id_or_name(runner, factory) -> None:
    result = runner.invoke(cli, ["instances", "info"])
    assert result.exit_code == 2
    factory.assert_not_called()


def test_info_by_id(runner, factory, clients) -> None:
    clients.compute.get_instance.return_value = SimpleNamespace(data=_instance())
    result = runner.invoke(cli, ["instances", "info", "--id", "ocid1.instance.oc1..web"])

    assert result.exit_code == 0, result.output
    assert "FAULT-DOMAIN-2" in result.output
    clients.compute.get_instance.assert_called_once_with("ocid1.instance.oc1..web")


def test_info_by_name(runner, factory, clients, paged) -> None:
    clients.compute.list_instances = paged([_instance(id="ocid1.instance.oc1..db", display_name="db"), _instance()])
    clients.compute.get_instance.return_value = SimpleNamespace(data=_instance())
    result = runner.invoke(cli, ["instances", "info", "--name", "web"])

    assert result.exit_code == 0, result.output
    clients.compute.get_instance.assert_called_once_with("ocid1.instance.oc1..web")


def test_info_by_unknown_name(runner, factory, clients, paged) -> None:
    clients.compute.list_instances = paged([_instance()])
    result = runner.invoke(cli, ["instances", "info", "--name", "nope"])

    assert result.exit_code == 1
    assert "No instance named 'nope'" in result.output


# ── instances create ──────────────────────────────────────────────────────

CREATE_ARGS = [
    "instances",
    "create",
    "--shape-name",
    "VM.Standard.A1.Flex",
    "--image-name",
    "ocid1.image.oc1..img",
    "--subnet-id",
    "ocid1.subnet.oc1..sn",
    "--availability-domain",
    "AD-1",
]


def test_create_without_keys_fails_before_any_call(runner, factory, clients) -> None:
    result = runner.invoke(cli, CREATE_ARGS + ["--public-keys", "   "])

    assert result.exit_code == 2
    assert "No valid public SSH keys" in result.output
    assert clients.compute.mock_calls == []
    assert clients.identity.mock_calls == []


def test_create_requires_shape(runner, factory) -> None:
    result = runner.invoke(cli, ["instances", "create", "--image-name", "x", "--public-keys", KEY])
    assert result.exit_code == 2
    assert "--shape-name" in result.output


def test_create_launches(runner, factory, clients, paged) -> None:
    clients.compute.list_shapes = paged([SimpleNamespace(shape="VM.Standard.A1.Flex")])
    clients.compute.launch_instance.return_value = SimpleNamespace(
        data=SimpleNamespace(id="ocid1.instance.oc1..new", lifecycle_state="PROVISIONING")
    )
    result = runner.invoke(
        cli, CREATE_ARGS + ["--public-keys", KEY, "--name", "web-1", "--ocpus", "2", "--memory-in-gbs", "16"]
    )

    assert result.exit_code == 0, result.output
    assert "PROVISIONING" in result.output
    details = clients.compute.launch_instance.call_args.args[0]
    assert details.display_name == "web-1"
    assert details.shape_config.memory_in_gbs == 16
    assert details.metadata["ssh_authorized_keys"] == KEY
    clients.compute.list_images.assert_not_called()


def test_create_rejects_negative_sizing(runner, factory, clients) -> None:
    result = runner.invoke(cli, CREATE_ARGS + ["--public-keys", KEY, "--ocpus", "-1"])
    assert result.exit_code == 2
    clients.compute.launch_instance.assert_not_called()


# ── images & shapes ───────────────────────────────────────────────────────


def test_list_images_platform(runner, factory, clients, paged) -> None:
    clients.compute.list_images = paged(
        [
            SimpleNamespace(
                id="ocid1.image.oc1..ol9",
                display_name="Oracle-Linux-9",
                operating_system="Oracle Linux",
                operating_system_version="9",
                lifecycle_state="AVAILABLE",
                base_image_id=None,
            )
        ]
    )
    result = runner.invoke(cli, ["instances", "list-images", "--platform", "--compartment-id", "dev", "--limit", "5"])

    assert result.exit_code == 0, result.output
    assert "Oracle-Linux-9" in result.output
    assert clients.compute.list_images.call_args.args == (clients.tenancy_id,)
    clients.identity.list_compartments.assert_not_called()


def test_list_images_empty(runner, factory, clients, paged) -> None:
    clients.compute.list_images = paged([])
    result = runner.invoke(cli, ["instances", "list-images"])
    assert result.exit_code == 0
    assert "No images found" in result.output


def test_list_shapes(runner, factory, clients, paged) -> None:
    clients.compute.list_shapes = paged(
        [
            SimpleNamespace(
                shape="VM.Flex",
                processor_description="Ampere",
                ocpu_options=SimpleNamespace(min=1.0, max=80.0),
                memory_options=SimpleNamespace(min_in_g_bs=1.0, max_in_g_bs=512.0, default_per_ocpu_in_g_bs=6.0),
                networking_bandwidth_options=None,
                ocpus=None,
                memory_in_gbs=None,
                networking_bandwidth_in_gbps=1.0,
            )
        ]
    )
    result = runner.invoke(cli, ["instances", "list-shapes", "--image-id", "ocid1.image.oc1..img"])

    assert result.exit_code == 0, result.output
    assert "VM.Flex" in result.output
    assert clients.compute.list_shapes.call_args.kwargs["image_id"] == "ocid1.image.oc1..img"


# ── compartments ──────────────────────────────────────────────────────────


def test_compartments_list(runner, factory, clients, paged_by_parent) -> None:
    def comp(name: str) -> SimpleNamespace:
        return SimpleNamespace(
            id=f"ocid1.compartment.oc1..{name}", name=name, description="", lifecycle_state="ACTIVE"
        )

    clients.identity.list_compartments = paged_by_parent(
        {clients.tenancy_id: [comp("apps"), comp("shared")], "ocid1.compartment.oc1..apps": [comp("web")]},
        page_size=1,
    )
    result = runner.invoke(cli, ["compartments", "list", "--active-only"])

    assert result.exit_code == 0, result.output
    for name in ("apps", "shared", "web"):
        assert name in result.output
    assert "3 compartment(s)" in result.output
    assert clients.identity.list_compartments.call_args.kwargs["lifecycle_state"] == "ACTIVE"


def test_compartments_list_failure(runner, factory, clients) -> None:
    clients.identity.list_compartments = MagicMock(
        side_effect=oci.exceptions.ServiceError(404, "NotAuthorizedOrNotFound", {}, "boom")
    )
    clients.identity.list_compartments.__name__ = "list_compartments"
    result = runner.invoke(cli, ["compartments", "list"])
    assert result.exit_code == 1
    assert "NotAuthorizedOrNotFound" in result.output


def test_unusable_api_key_exits_with_message(runner, tmp_path) -> None:
    key_file = tmp_path / "key.pem"
    key_file.write_text("not a key\n")
    config = tmp_path / "config"
    config.write_text(
        "[DEFAULT]\n"
        "user=ocid1.user.oc1..aaaa\n"
        "fingerprint=11:22:33:44:55:66:77:88:99:00:aa:bb:cc:dd:ee:ff\n"
        "tenancy=ocid1.tenancy.oc1..aaaa\n"
        "region=us-ashburn-1\n"
        f"key_file={key_file}\n"
    )
    result = runner.invoke(
        cli, ["--config-file", str(config), "instances", "list", "--compartment-id", "ocid1.compartment.oc1..x"]
    )

    assert result.exit_code == 2
    assert isinstance(result.exception, SystemExit)
    assert "API key of profile 'DEFAULT'" in result.output
