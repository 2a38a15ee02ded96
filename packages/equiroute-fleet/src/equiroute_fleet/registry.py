"""Vehicle registry lookup used to pre-fill new vehicles.

The registry is an external collaborator: lookups never gate anything
in the compliance or registration flows.
"""

import logging
from dataclasses import dataclass, field

import httpx

from .conf import registry_timeout, registry_token, registry_url
from .exceptions import RegistryUnavailable, VehicleNotInRegistry

logger = logging.getLogger(__name__)


def normalize_plate(license_plate: str) -> str:
    """Strip whitespace and uppercase a license plate."""
    return "".join((license_plate or "").split()).upper()


@dataclass
class RegistryVehicle:
    """Vehicle attributes as reported by the registry."""

    license_plate: str
    make: str = ""
    model: str = ""
    variant: str = ""
    vin: str = ""
    first_registration: str = ""
    total_weight: int | None = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_payload(cls, license_plate: str, data: dict) -> "RegistryVehicle":
        return cls(
            license_plate=license_plate,
            make=data.get("make") or "",
            model=data.get("model") or "",
            variant=data.get("variant") or "",
            vin=data.get("vin") or "",
            first_registration=data.get("first_registration") or "",
            total_weight=data.get("total_weight"),
            raw=data,
        )


class VehicleRegistryClient:
    """HTTP client for the vehicle registry."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url or registry_url()
        self.token = token if token is not None else registry_token()
        self.client = httpx.Client(
            timeout=timeout if timeout is not None else registry_timeout(),
            transport=transport,
        )

    def lookup(self, license_plate: str) -> RegistryVehicle:
        """
        Look up a vehicle by license plate.

        Raises:
            VehicleNotInRegistry: The registry answered 404
            RegistryUnavailable: Network errors and any other non-2xx answer
        """
        plate = normalize_plate(license_plate)
        if not plate:
            raise VehicleNotInRegistry(license_plate)

        try:
            response = self.client.get(
                f"{self.base_url}/vehicles/{plate}",
                headers={"X-AUTH-TOKEN": self.token, "Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Vehicle registry request for {plate} failed: {e}")
            raise RegistryUnavailable(str(e)) from e

        if response.status_code == 404:
            raise VehicleNotInRegistry(plate)

        try:
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPStatusError, ValueError) as e:
            logger.error(f"Vehicle registry returned an unusable response for {plate}: {e}")
            raise RegistryUnavailable(str(e)) from e

        if not isinstance(data, dict):
            logger.error(f"Vehicle registry returned a non-object payload for {plate}")
            raise RegistryUnavailable(f"Unexpected payload type {type(data).__name__}")

        return RegistryVehicle.from_payload(plate, data)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def prefill_vehicle(license_plate: str, client: VehicleRegistryClient | None = None) -> RegistryVehicle:
    """Fetch registry attributes for a plate to pre-fill a vehicle form."""
    if client is not None:
        return client.lookup(license_plate)
    with VehicleRegistryClient() as client:
        return client.lookup(license_plate)
