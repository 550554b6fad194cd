"""
Services layer for the label dispatch service.

- ShipmentLabelDispatcher: label retrieval and delivery on shipment
- DispatchPolicy: configurable vs. fixed recipient, strict vs. lenient errors
- ShippingMethodRepository / PackagingSlipRepository: host record lookups
"""

from .label_dispatcher import DispatchPolicy, ShipmentLabelDispatcher
from .repositories import (
    PackagingSlipRepository,
    ShippingMethodRepository,
    load_repositories,
)

__all__ = [
    "DispatchPolicy",
    "ShipmentLabelDispatcher",
    "PackagingSlipRepository",
    "ShippingMethodRepository",
    "load_repositories",
]
