"""
Custom exceptions for the label dispatch service.

Exception Hierarchy:
    LabelDispatchError (base)
    ├── ConfigurationError          - Carrier or SMTP settings missing (startup failure)
    ├── CarrierError                - Carrier API call failed (runtime)
    │   ├── CarrierUnavailableError - Carrier could not be reached
    │   ├── ShipmentCreationError   - Parcel could not be created
    │   └── DeliveryError           - Label fetch returned a non-OK status
    └── EmailTransportError         - Label email could not be sent

Usage:
    Startup errors (ConfigurationError) cause the app to fail fast.
    CarrierError is propagated or logged depending on the dispatch policy.
    EmailTransportError always propagates to the request handler.
"""

from typing import Optional, Dict, Any


class LabelDispatchError(Exception):
    """
    Base exception for all label dispatch errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# STARTUP ERRORS - Application will not start if these occur
# =============================================================================

class ConfigurationError(LabelDispatchError):
    """
    A required setting is missing or invalid.

    Typical causes:
    - CARRIER_API_URL not set in .env
    - SMTP_HOST not set while sending is enabled
    """

    def __init__(self, setting: str, reason: str = "is not configured"):
        message = f"Setting {setting} {reason}"
        details = {
            "setting": setting,
            "resolution": f"Set {setting} in the environment or .env file",
        }
        super().__init__(message, details)
        self.setting = setting


# =============================================================================
# RUNTIME ERRORS - The request fails, the application keeps running
# =============================================================================

class CarrierError(LabelDispatchError):
    """
    Base class for carrier API failures.

    Carries the carrier shipment id and HTTP status code when known.
    """

    def __init__(
        self,
        message: str,
        carrier_shipment_id: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if carrier_shipment_id:
            error_details["carrier_shipment_id"] = carrier_shipment_id
        if status_code is not None:
            error_details["status_code"] = status_code
        super().__init__(message, error_details)
        self.carrier_shipment_id = carrier_shipment_id
        self.status_code = status_code


class CarrierUnavailableError(CarrierError):
    """The carrier API could not be reached (DNS, timeout, connection reset)."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Carrier API unreachable: {reason}",
            details={"url": url},
        )
        self.url = url


class ShipmentCreationError(CarrierError):
    """
    The carrier refused to create a parcel for a packaging slip.

    Raised when the create call fails, or when it succeeds without
    returning a parcel id.
    """

    def __init__(
        self,
        document_number: str,
        status_code: Optional[int] = None,
        reason: str = "Carrier did not return a parcel id"
    ):
        super().__init__(
            f"Could not create parcel for packaging slip {document_number}: {reason}",
            status_code=status_code,
            details={"document_number": document_number},
        )
        self.document_number = document_number


class DeliveryError(CarrierError):
    """
    The label could not be delivered to the recipient.

    The carrier answered the label request with a non-OK status, so there is
    nothing to send.
    """

    def __init__(self, recipient: str, carrier_shipment_id: str, status_code: int):
        super().__init__(
            "Could not send barcode to the printer's email address",
            carrier_shipment_id=carrier_shipment_id,
            status_code=status_code,
            details={"recipient": recipient},
        )
        self.recipient = recipient


class EmailTransportError(LabelDispatchError):
    """The SMTP server rejected the message or could not be reached."""

    def __init__(self, recipient: str, reason: str):
        super().__init__(
            f"Could not send email to {recipient}: {reason}",
            {"recipient": recipient},
        )
        self.recipient = recipient
