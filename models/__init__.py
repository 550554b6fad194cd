"""
Data models for the label dispatch service.

- PackagingSlip / ShippingMethod: host records the dispatcher reads
- LabelFormat / LabelDocument / DeliveryPreferences: label delivery
- FormDefinition / FormField: the scan form subscribers extend
- PackagingSlipStatusChangedEvent / FormBuilderEvent: event payloads
"""

from .packaging_slip import PackagingSlip, ShippingMethod
from .label import DeliveryPreferences, LabelDocument, LabelFormat
from .form import FormDefinition, FormField
from .events import (
    EVENT_FORM_BUILDER,
    EVENT_STATUS_SHIPPED,
    FormBuilderEvent,
    PackagingSlipStatusChangedEvent,
)

__all__ = [
    # Host records
    "PackagingSlip",
    "ShippingMethod",
    # Label models
    "DeliveryPreferences",
    "LabelDocument",
    "LabelFormat",
    # Form models
    "FormDefinition",
    "FormField",
    # Events
    "EVENT_FORM_BUILDER",
    "EVENT_STATUS_SHIPPED",
    "FormBuilderEvent",
    "PackagingSlipStatusChangedEvent",
]
