"""
Domain exceptions for the InvoiceFlow engine.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class InvoiceFlowError(Exception):
    """Base exception for all InvoiceFlow errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(InvoiceFlowError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidLineItemError(ValidationError):
    """A line item failed validation before tax computation."""

    def __init__(self, line_number: int | None, field: str, message: str, value: Any = None):
        prefix = f"Item {line_number}: " if line_number is not None else ""
        super().__init__(field=field, message=f"{prefix}{message}", value=value)
        self.code = "INVALID_LINE_ITEM"
        self.details["line_number"] = line_number


class InvalidHsnSacError(InvalidLineItemError):
    """HSN/SAC code is not 4 to 8 digits."""

    def __init__(self, line_number: int | None, code_value: str | None):
        super().__init__(
            line_number,
            field="hsn_sac",
            message="HSN/SAC code must be 4 to 8 digits",
            value=code_value,
        )
        self.code = "INVALID_HSN_SAC"


class InvalidStateCodeError(ValidationError):
    """State code is not a GST state code between 01 and 38."""

    def __init__(self, field: str, value: Any):
        super().__init__(
            field=field,
            message="State code must be two digits between 01 and 38",
            value=value,
        )
        self.code = "INVALID_STATE_CODE"


class MissingStateCodeError(ValidationError):
    """Owner or client has no state code to classify the supply."""

    def __init__(self, party: str, party_id: int):
        super().__init__(
            field=f"{party}.state_code",
            message=f"No state code on {party} {party_id}",
        )
        self.code = "MISSING_STATE_CODE"
        self.details["party_id"] = party_id


class InvalidGstinError(ValidationError):
    """GSTIN does not match the 15 character format."""

    def __init__(self, gstin: str):
        super().__init__(field="gstin", message="Invalid GSTIN format", value=gstin)
        self.code = "INVALID_GSTIN"


class InvalidAmountError(ValidationError):
    """Amount is outside the accepted range."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(field=field, message=message, value=value)
        self.code = "INVALID_AMOUNT"


# Not Found Exceptions
class NotFoundError(InvoiceFlowError):
    """Requested entity does not exist."""

    pass


class InvoiceNotFoundError(NotFoundError):
    """Invoice not found in storage."""

    def __init__(self, invoice_id: int):
        super().__init__(
            f"Invoice not found: {invoice_id}",
            code="INVOICE_NOT_FOUND",
            details={"invoice_id": invoice_id},
        )


class OwnerNotFoundError(NotFoundError):
    """Owner (business account) not found."""

    def __init__(self, owner_id: int):
        super().__init__(
            f"Owner not found: {owner_id}",
            code="OWNER_NOT_FOUND",
            details={"owner_id": owner_id},
        )


class ClientNotFoundError(NotFoundError):
    """Client not found for the owner."""

    def __init__(self, client_id: int, owner_id: int | None = None):
        super().__init__(
            f"Client not found: {client_id}",
            code="CLIENT_NOT_FOUND",
            details={"client_id": client_id, "owner_id": owner_id},
        )


class SettlementNotFoundError(NotFoundError):
    """Settlement record not found."""

    def __init__(self, settlement_id: int | None = None, invoice_id: int | None = None):
        target = f"invoice {invoice_id}" if settlement_id is None else str(settlement_id)
        super().__init__(
            f"Settlement not found: {target}",
            code="SETTLEMENT_NOT_FOUND",
            details={"settlement_id": settlement_id, "invoice_id": invoice_id},
        )


# State Machine Exceptions
class InvalidStatusTransitionError(InvoiceFlowError):
    """Requested status change is not allowed from the current status."""

    def __init__(self, entity: str, current: str, requested: str):
        super().__init__(
            f"Cannot move {entity} from '{current}' to '{requested}'",
            code="INVALID_STATUS_TRANSITION",
            details={"entity": entity, "current": current, "requested": requested},
        )


class InvoiceLockedError(InvoiceFlowError):
    """Invoice is paid or cancelled and can no longer be changed."""

    def __init__(self, invoice_id: int, status: str, action: str = "edit"):
        super().__init__(
            f"Cannot {action} {status} invoice {invoice_id}",
            code="INVOICE_LOCKED",
            details={"invoice_id": invoice_id, "status": status, "action": action},
        )


# Storage Exceptions
class StorageError(InvoiceFlowError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class SequenceAllocationError(StorageError):
    """Invoice number could not be allocated."""

    def __init__(self, owner_id: int, year: int, reason: str):
        super().__init__(
            f"Failed to allocate invoice number for owner {owner_id}, year {year}: {reason}",
            code="SEQUENCE_ALLOCATION_FAILED",
            details={"owner_id": owner_id, "year": year, "reason": reason},
        )


class CompensationFailedError(StorageError):
    """Rolling back a partially written invoice failed."""

    def __init__(self, invoice_id: int, original_error: str, compensation_error: str):
        super().__init__(
            f"Invoice {invoice_id} left partially written: line items failed "
            f"({original_error}) and header delete failed ({compensation_error})",
            code="COMPENSATION_FAILED",
            details={
                "invoice_id": invoice_id,
                "original_error": original_error,
                "compensation_error": compensation_error,
            },
        )


# Settlement Exceptions
class SettlementError(InvoiceFlowError):
    """Settlement could not be computed or recorded."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"Settlement failed: {reason}",
            code="SETTLEMENT_ERROR",
            details={"reason": reason, **(details or {})},
        )


class SettlementPolicyNotConfiguredError(SettlementError):
    """No fee policy is configured, so settlement cannot be computed."""

    def __init__(self, missing: list[str]):
        super().__init__(
            "settlement fee policy is not configured",
            details={"missing": missing},
        )
        self.code = "SETTLEMENT_POLICY_NOT_CONFIGURED"


class ConfigurationError(InvoiceFlowError):
    """Configuration error."""

    pass
