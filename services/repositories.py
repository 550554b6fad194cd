"""
In-memory lookups for shipping methods and packaging slips.

The order-processing host owns these records. For a standalone deployment
they are seeded from a JSON data file:

    {
        "shipping_methods": [{"id": 1, "type": "carrier_dhl", "name": "DHL"}],
        "packaging_slips": [
            {"id": 10, "document_number": "PS-0010", "shipping_method_id": 1}
        ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from models.packaging_slip import PackagingSlip, ShippingMethod
from logging_config import get_logger


logger = get_logger(__name__)


class ShippingMethodRepository:
    """Read-only lookup of shipping methods by id."""

    def __init__(self, methods: Iterable[ShippingMethod] = ()):
        self._methods: Dict[int, ShippingMethod] = {}
        for method in methods:
            self.add(method)

    def add(self, method: ShippingMethod) -> None:
        self._methods[method.method_id] = method

    def get(self, method_id: int) -> Optional[ShippingMethod]:
        return self._methods.get(method_id)

    def __len__(self) -> int:
        return len(self._methods)


class PackagingSlipRepository:
    """
    Packaging slips by id.

    get() returns the stored instance, so a carrier shipment id assigned
    during a dispatch is visible to later lookups.
    """

    def __init__(self, slips: Iterable[PackagingSlip] = ()):
        self._slips: Dict[int, PackagingSlip] = {}
        for slip in slips:
            self.add(slip)

    def add(self, slip: PackagingSlip) -> None:
        self._slips[slip.slip_id] = slip

    def get(self, slip_id: int) -> Optional[PackagingSlip]:
        return self._slips.get(slip_id)

    def __len__(self) -> int:
        return len(self._slips)


def load_repositories(
    data_file: Optional[Union[str, Path]] = None
) -> Tuple[ShippingMethodRepository, PackagingSlipRepository]:
    """
    Build both repositories, seeded from data_file when it exists.

    Args:
        data_file: Path to the JSON seed file (optional)

    Returns:
        Tuple of (shipping methods, packaging slips)
    """
    methods = ShippingMethodRepository()
    slips = PackagingSlipRepository()

    if not data_file:
        return methods, slips

    path = Path(data_file)
    if not path.exists():
        logger.warning(f"Shipping data file not found: {path}")
        return methods, slips

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    for item in data.get("shipping_methods", []):
        methods.add(ShippingMethod.from_dict(item))
    for item in data.get("packaging_slips", []):
        slips.add(PackagingSlip.from_dict(item))

    logger.info(f"Loaded {len(methods)} shipping methods and {len(slips)} packaging slips from {path}")
    return methods, slips
