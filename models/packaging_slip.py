"""
Packaging slip and shipping method models.

Both records belong to the order-processing host. The label dispatcher only
reads them, apart from carrier_shipment_id which the carrier client fills in
once a parcel has been created.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ShippingMethod:
    """A shipping method configured in the shop."""

    method_id: int
    type: str
    """Tag deciding which carrier integration handles the method."""

    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.method_id, "type": self.type, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShippingMethod":
        return cls(
            method_id=int(data["id"]),
            type=data.get("type", ""),
            name=data.get("name", ""),
        )


@dataclass
class PackagingSlip:
    """
    One parcel of an order.

    Mutable on purpose: create_parcel() assigns carrier_shipment_id on the
    same instance so later reads in the request see it.
    """

    slip_id: int
    document_number: str
    shipping_method_id: int
    carrier_shipment_id: Optional[str] = None
    """Carrier's parcel id. None until the carrier confirmed the parcel."""

    shipping_address: Dict[str, Any] = field(default_factory=dict)
    """Receiver name and address, passed to the carrier as-is."""

    weight_kg: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.slip_id,
            "document_number": self.document_number,
            "shipping_method_id": self.shipping_method_id,
            "carrier_shipment_id": self.carrier_shipment_id,
            "shipping_address": dict(self.shipping_address),
            "weight_kg": self.weight_kg,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackagingSlip":
        return cls(
            slip_id=int(data["id"]),
            document_number=str(data.get("document_number", data["id"])),
            shipping_method_id=int(data["shipping_method_id"]),
            carrier_shipment_id=data.get("carrier_shipment_id") or None,
            shipping_address=dict(data.get("shipping_address", {})),
            weight_kg=float(data.get("weight_kg", 1.0)),
        )
