"""
Typed Exception Hierarchy for the ERP.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the HTTP layer, scripts, tests) must be able to tell a rejected
input from a broken business rule from a missing row without parsing
messages.  Every exception therefore:

  1. Has its own class (catch by type, not by message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Stores its context as attributes (not only in the message string)

Example:
    try:
        po_service.confirm_purchase_order(po_id)
    except InvalidStatusTransitionError as e:
        api_response(code=e.code, status=e.current_status)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ErpError (base)
    |
    +-- ValidationError                 rejected before any write
    |
    +-- ResourceNotFoundError           referenced row does not exist
    |
    +-- BusinessError                   business-rule violation
        +-- InvalidStatusTransitionError
        +-- DuplicateResourceError
        +-- VendorRoleRequiredError
        +-- PaymentError
            +-- PaymentNotAllowedError
            +-- PaymentExceedsBalanceError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | HTTP | When Raised
----------------|-----------------------------|------|-------------------------------
Validation      | VALIDATION_ERROR            | 400  | Field-level input failure
Not found       | RESOURCE_NOT_FOUND          | 404  | ID doesn't exist
Business        | BUSINESS_RULE_VIOLATION     | 400  | Generic rule violation
                | INVALID_STATUS_TRANSITION   | 400  | Action illegal in current status
                | DUPLICATE_RESOURCE          | 400  | Unique business key already used
                | VENDOR_ROLE_REQUIRED        | 400  | Company is not a vendor
                | PAYMENT_NOT_ALLOWED         | 400  | Payable/invoice cannot take payment
                | PAYMENT_EXCEEDS_BALANCE     | 400  | Amount above remaining balance

Event handler exceptions are NOT wrapped: whatever a handler raises
propagates to the publishing service and aborts the unit of work.
Infrastructure failures (SQLAlchemy OperationalError, etc.) are never
caught here and surface as 500.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any


def _plain(value: Any) -> Any:
    """Render str-enums by value so messages stay stable across Python versions."""
    if isinstance(value, Enum):
        return value.value
    return value


class ErpError(Exception):
    """
    Base exception for all ERP errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ERP_ERROR"

    def details(self) -> dict[str, Any]:
        """Context attributes set by the subclass constructor."""
        return {k: v for k, v in vars(self).items() if not k.startswith("_")}


class ValidationError(ErpError):
    """Input failed field-level validation; nothing was written."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field_errors: dict[str, str] | None = None):
        self.field_errors = dict(field_errors or {})
        super().__init__(message)


class ResourceNotFoundError(ErpError):
    """Referenced resource does not exist."""

    code: str = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any):
        self.resource = resource
        self.resource_id = str(resource_id)
        super().__init__(f"{resource} not found with ID: {resource_id}")


class BusinessError(ErpError):
    """Base exception for business-rule violations."""

    code: str = "BUSINESS_RULE_VIOLATION"


class InvalidStatusTransitionError(BusinessError):
    """
    The requested action is not legal from the entity's current status.

    Transitions are idempotent-unsafe: repeating a transition that already
    happened raises this error rather than silently succeeding.
    """

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, entity: str, entity_id: Any, current_status: Any, action: str):
        self.entity = entity
        self.entity_id = str(entity_id)
        self.current_status = _plain(current_status)
        self.action = action
        super().__init__(
            f"Cannot {action} {entity} in {self.current_status} status"
        )


class DuplicateResourceError(BusinessError):
    """A unique business key is already taken."""

    code: str = "DUPLICATE_RESOURCE"

    def __init__(self, resource: str, key: str, value: Any):
        self.resource = resource
        self.key = key
        self.value = str(value)
        super().__init__(f"{resource} with {key} '{value}' already exists")


class VendorRoleRequiredError(BusinessError):
    """Company used as a vendor lacks the VENDOR/OUTSOURCE role or is inactive."""

    code: str = "VENDOR_ROLE_REQUIRED"

    def __init__(self, company_id: Any):
        self.company_id = str(company_id)
        super().__init__(f"Company with ID {company_id} is not an active vendor")


class PaymentError(BusinessError):
    """Base exception for payment recording errors."""

    code: str = "PAYMENT_ERROR"


class PaymentNotAllowedError(PaymentError):
    """The payable or invoice cannot receive payments in its current status."""

    code: str = "PAYMENT_NOT_ALLOWED"

    def __init__(self, entity: str, entity_id: Any, current_status: Any):
        self.entity = entity
        self.entity_id = str(entity_id)
        self.current_status = _plain(current_status)
        super().__init__(
            f"Cannot record payment for {entity} in {self.current_status} status"
        )


class PaymentExceedsBalanceError(PaymentError):
    """Payment amount is greater than the remaining balance."""

    code: str = "PAYMENT_EXCEEDS_BALANCE"

    def __init__(self, amount: Decimal, remaining_balance: Decimal):
        self.amount = str(amount)
        self.remaining_balance = str(remaining_balance)
        super().__init__(
            f"Payment amount {amount} exceeds remaining balance {remaining_balance}"
        )


def http_status_for(error: BaseException) -> int:
    """Map an exception to the HTTP status the API layer should return."""
    if isinstance(error, ResourceNotFoundError):
        return 404
    if isinstance(error, (ValidationError, BusinessError)):
        return 400
    return 500
