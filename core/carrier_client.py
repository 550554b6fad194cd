"""
HTTP client for the carrier's parcel API.

Two calls are needed to get a label for a packaging slip:
    - create_parcel(): register the parcel with the carrier (once per slip)
    - fetch_label():   download the rendered label in ZPL or PDF

Authentication uses a pre-issued bearer token from configuration. The
client keeps one requests.Session so consecutive calls within a request
reuse the connection.

Usage:
    client = CarrierClient(
        base_url="https://api-gw.dhlparcel.nl",
        api_token="...",
    )
    if not slip.carrier_shipment_id:
        client.create_parcel(slip)
    status_code, content = client.fetch_label(slip.carrier_shipment_id, "application/pdf")
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests

from models.packaging_slip import PackagingSlip
from logging_config import get_logger
from .exceptions import CarrierUnavailableError, ConfigurationError, ShipmentCreationError


class CarrierClient:
    """
    Thin wrapper around the carrier's REST endpoints.

    fetch_label() returns the status code instead of raising; the caller
    decides what a non-OK answer means.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout_seconds: float = 30.0,
        parcel_type: str = "SMALL",
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the carrier client.

        Args:
            base_url: Root URL of the carrier API
            api_token: Bearer token sent with every request
            timeout_seconds: Timeout for each HTTP call
            parcel_type: Carrier parcel type key used when creating parcels
            session: Optional requests.Session (mainly for tests)
            logger: Optional logger (defaults to module logger)

        Raises:
            ConfigurationError: If base_url is empty
        """
        if not base_url:
            raise ConfigurationError("CARRIER_API_URL")

        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.timeout_seconds = timeout_seconds
        self.parcel_type = parcel_type
        self.session = session or requests.Session()
        self.logger = logger or get_logger(__name__)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, accept: str = "application/json") -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Accept": accept,
        }

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self._url(path)
        try:
            return self.session.request(method, url, timeout=self.timeout_seconds, **kwargs)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Network error calling carrier {method} {url}: {e}")
            raise CarrierUnavailableError(url, str(e)) from e

    def build_parcel_payload(self, slip: PackagingSlip) -> Dict[str, Any]:
        """Build the create-parcel request body for a packaging slip."""
        return {
            "reference": slip.document_number,
            "receiver": dict(slip.shipping_address),
            "parcelTypeKey": self.parcel_type,
            "weight": slip.weight_kg,
            "quantity": 1,
        }

    def create_parcel(self, slip: PackagingSlip) -> str:
        """
        Create a parcel for the slip and store the carrier's id on it.

        Args:
            slip: Packaging slip without a carrier shipment yet

        Returns:
            The carrier shipment id, also assigned to slip.carrier_shipment_id

        Raises:
            ShipmentCreationError: If the carrier rejects the parcel or
                returns no id
            CarrierUnavailableError: If the carrier cannot be reached
        """
        self.logger.info(f"Creating carrier parcel for packaging slip {slip.document_number}")
        response = self._request(
            "POST",
            "parcels",
            json=self.build_parcel_payload(slip),
            headers=self._headers(),
        )

        if not 200 <= response.status_code < 300:
            self.logger.error(
                f"Carrier rejected parcel for {slip.document_number}: "
                f"HTTP {response.status_code} {response.text[:200]}"
            )
            raise ShipmentCreationError(
                slip.document_number,
                status_code=response.status_code,
                reason=f"HTTP {response.status_code}",
            )

        try:
            body = response.json()
        except ValueError:
            body = None

        parcel_id = None
        if isinstance(body, dict):
            parcel_id = body.get("id") or body.get("parcelId")
        if not parcel_id:
            raise ShipmentCreationError(slip.document_number, status_code=response.status_code)

        slip.carrier_shipment_id = str(parcel_id)
        self.logger.info(f"Carrier parcel {slip.carrier_shipment_id} created for {slip.document_number}")
        return slip.carrier_shipment_id

    def fetch_label(self, carrier_shipment_id: str, accept: str) -> Tuple[int, bytes]:
        """
        Download the label for a carrier shipment.

        Args:
            carrier_shipment_id: Parcel id returned by create_parcel()
            accept: Requested content type (application/zpl or application/pdf)

        Returns:
            Tuple of (HTTP status code, response body)

        Raises:
            CarrierUnavailableError: If the carrier cannot be reached
        """
        self.logger.debug(f"Fetching label {carrier_shipment_id} as {accept}")
        response = self._request(
            "GET",
            f"labels/{carrier_shipment_id}",
            headers=self._headers(accept),
        )
        return response.status_code, response.content

    def close(self) -> None:
        self.session.close()
