"""
Error taxonomy shared by the service and the HTTP boundary.

InputValidationError and NotFoundError are expected outcomes reported to the
caller. InternalError marks a defect; the boundary logs it and answers
generically.
"""


class VitalSimError(Exception):
    """Base class for errors raised by the synthesis service."""


class InputValidationError(VitalSimError):
    """Missing or out-of-range input, reported with the offending field names."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = fields or []


class NotFoundError(VitalSimError):
    """Nothing stored for the requested device or filter."""

    def __init__(self, message: str, device_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.device_id = device_id


class InternalError(VitalSimError):
    """Unexpected defect, e.g. a corrupt stored record."""
