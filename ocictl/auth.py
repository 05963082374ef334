"""OCI authentication — profile lookup and SDK client factory."""

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import Any, Optional

import oci

from .config import DEFAULT_OCI_CONFIG
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# OCI config file helpers
# ---------------------------------------------------------------------------


def list_profiles(config_file: Path = DEFAULT_OCI_CONFIG) -> list[str]:
    """Return profile names from an OCI config file."""
    if not config_file.is_file():
        return []
    cp = configparser.ConfigParser()
    cp.read(config_file)
    profiles = list(cp.sections())
    # configparser hides [DEFAULT]; the SDK treats it as a regular profile
    if cp.defaults():
        profiles.insert(0, "DEFAULT")
    return profiles


# ---------------------------------------------------------------------------
# SDK client factory
# ---------------------------------------------------------------------------


class OCIClients:
    """Lazily-initialised container for the OCI service clients of one profile.

    An instance is created once per command and handed to every resolver and
    handler; nothing reads credentials from global state.
    """

    def __init__(self, profile: str = "DEFAULT", config_file: Path = DEFAULT_OCI_CONFIG):
        self.profile = profile
        self.config_file = Path(config_file).expanduser()
        self._config: Optional[dict] = None
        self._compute: Optional[oci.core.ComputeClient] = None
        self._identity: Optional[oci.identity.IdentityClient] = None

    @property
    def config(self) -> dict:
        if self._config is None:
            logger.debug("Loading profile %s from %s", self.profile, self.config_file)
            try:
                config = oci.config.from_file(
                    file_location=str(self.config_file),
                    profile_name=self.profile,
                )
                oci.config.validate_config(config)
            except oci.exceptions.ProfileNotFound as exc:
                available = ", ".join(list_profiles(self.config_file)) or "none"
                raise ConfigurationError(
                    f"Profile '{self.profile}' not found in {self.config_file} "
                    f"(available: {available})"
                ) from exc
            except oci.exceptions.ConfigFileNotFound as exc:
                raise ConfigurationError(
                    f"OCI config file not found: {self.config_file}"
                ) from exc
            except oci.exceptions.ClientError as exc:
                raise ConfigurationError(
                    f"Invalid OCI config for profile '{self.profile}': {exc}"
                ) from exc
            self._config = config
        return self._config

    @property
    def tenancy_id(self) -> str:
        """OCID of the tenancy (root compartment) of the profile."""
        tenancy = self.config.get("tenancy", "")
        if not tenancy:
            raise ConfigurationError(f"Profile '{self.profile}' has no tenancy OCID")
        return tenancy

    def _build(self, client_cls: type) -> Any:
        config = self.config
        # the signer loads the private key here
        try:
            return client_cls(config)
        except oci.exceptions.ClientError as exc:
            raise ConfigurationError(
                f"Cannot use the API key of profile '{self.profile}': {exc}"
            ) from exc

    @property
    def compute(self) -> oci.core.ComputeClient:
        if self._compute is None:
            self._compute = self._build(oci.core.ComputeClient)
        return self._compute

    @property
    def identity(self) -> oci.identity.IdentityClient:
        if self._identity is None:
            self._identity = self._build(oci.identity.IdentityClient)
        return self._identity
