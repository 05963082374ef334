"""Error taxonomy and translation of OCI SDK exceptions.

Every failure a command can hit is raised as an :class:`OcictlError`
subclass and turned into a message plus exit status at the top of the CLI.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import oci


class OcictlError(Exception):
    """Base class for errors reported to the user."""

    exit_code = 1


class NotFoundError(OcictlError):
    """A name could not be resolved to a resource."""


class InvalidInputError(OcictlError):
    """Conflicting, missing or empty command-line input."""

    exit_code = 2


class ConfigurationError(InvalidInputError):
    """The OCI config file or profile is missing or invalid."""


class RemoteCallError(OcictlError):
    """An OCI API call failed (auth, network or service side)."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.request_id = request_id


# status -> hint shown after the service message
_HINTS: dict[int, str] = {
    401: "Verify the API key and fingerprint of the selected profile.",
    403: "Check the IAM policies granted to your user or group.",
    404: "Verify the OCID exists in this region and that you are authorized to see it.",
    409: "The resource may be in a transitional state.",
    429: "Too many requests; wait before trying again.",
}


def _hint(status: Optional[int]) -> str:
    if status is None:
        return ""
    if status >= 500:
        return "OCI service error; check status.oracle.com."
    return _HINTS.get(status, "")


def from_service_error(exc: oci.exceptions.ServiceError, action: str) -> RemoteCallError:
    """Build a :class:`RemoteCallError` from an SDK service error."""
    message = f"Failed {action}: {exc.code} ({exc.status}) {exc.message}"
    hint = _hint(exc.status)
    if hint:
        message = f"{message}\n{hint}"
    request_id = (exc.headers or {}).get("opc-request-id")
    return RemoteCallError(message, status=exc.status, code=exc.code, request_id=request_id)


@contextmanager
def remote_call(action: str) -> Iterator[None]:
    """Translate SDK failures raised inside the block into :class:`RemoteCallError`.

    *action* completes the sentence "Failed ...", e.g. ``"listing images"``.
    """
    try:
        yield
    except oci.exceptions.ServiceError as exc:
        raise from_service_error(exc, action) from exc
    except oci.exceptions.RequestException as exc:
        raise RemoteCallError(f"Failed {action}: {exc}") from exc
