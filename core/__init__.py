"""
Core module for the label dispatch service.

Contains the infrastructure the dispatcher talks to:
- exceptions: Custom exception hierarchy
- events: Event dispatcher with an explicit registration table
- carrier_client: HTTP client for the carrier's parcel API
- mailer: SMTP email transport
"""

from .exceptions import (
    LabelDispatchError,
    ConfigurationError,
    CarrierError,
    CarrierUnavailableError,
    ShipmentCreationError,
    DeliveryError,
    EmailTransportError,
)
from .events import EventDispatcher
from .carrier_client import CarrierClient
from .mailer import Attachment, Mailer

__all__ = [
    "LabelDispatchError",
    "ConfigurationError",
    "CarrierError",
    "CarrierUnavailableError",
    "ShipmentCreationError",
    "DeliveryError",
    "EmailTransportError",
    "EventDispatcher",
    "CarrierClient",
    "Attachment",
    "Mailer",
]
