"""
Error taxonomy for the autoscale policy client.

Three families, all deriving from AutoScaleError:
  - PreconditionError: a local precondition (identity, required attribute)
    is not met. Raised before validation and before any network call.
  - PolicyValidationError: the record is not internally consistent for its
    policy type. Always local, always carries the offending field name.
  - ServiceError: the remote control-plane (or the transport) rejected the
    call. Subclasses map 1:1 to HTTP status codes.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple


class AutoScaleError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Local errors
# ---------------------------------------------------------------------------


class PreconditionError(AutoScaleError):
    pass


class MissingRequiredAttributes(PreconditionError):
    """
    Raised when an operation needs attributes that are not set on the record.
    """

    def __init__(self, attributes: Iterable[str]) -> None:
        self.attributes: Tuple[str, ...] = tuple(attributes)
        super().__init__(f"{', '.join(self.attributes)} is required for this operation")


class PolicyValidationError(AutoScaleError):
    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class MissingRequiredField(PolicyValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(field, f"Missing required field: {field}")


# ---------------------------------------------------------------------------
# Remote errors
# ---------------------------------------------------------------------------


class ServiceError(AutoScaleError):
    """
    Raised when the control-plane cannot be reached or returns an error.

    Catch-all for transport and protocol failures; the subclasses below
    are raised for the status codes the API documents.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.response_text = response_text
        self.operation = operation
        super().__init__(message)


class BadRequest(ServiceError):
    pass


class NotFound(ServiceError):
    pass


class InternalServerError(ServiceError):
    pass


STATUS_ERRORS = {
    400: BadRequest,
    404: NotFound,
    500: InternalServerError,
}


def error_for_status(status_code: int) -> type[ServiceError]:
    """Map an HTTP status to the ServiceError subclass raised for it."""
    return STATUS_ERRORS.get(status_code, ServiceError)
