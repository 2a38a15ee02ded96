"""Registration authority providers.

The authority receives a route and the ordered country codes and hands
back an opaque reference number. SimulatedAuthority issues numbers in
the TRACES format locally; HttpAuthority talks to a real endpoint.
"""

import logging
import secrets
from abc import ABC, abstractmethod

import httpx
from django.utils import timezone

from equiroute_core.conf import load_class

from .conf import authority_path, authority_timeout, authority_token, authority_url
from .exceptions import AuthorityError

logger = logging.getLogger(__name__)


class BaseAuthority(ABC):
    """Abstract base class for registration authorities."""

    authority_name: str = "base"

    @abstractmethod
    def register(self, route, countries: list[str], transport=None) -> str:
        """Register a transport and return its reference number.

        Args:
            route: Route of the transport
            countries: ISO country codes in travel order
            transport: The Transport being registered, if any

        Raises:
            AuthorityError: The authority rejected or failed the request
        """
        raise NotImplementedError

    def close(self):
        """Release connections held by the authority."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class SimulatedAuthority(BaseAuthority):
    """Issues TRACES.<CC>.<YEAR>.<7 digits> numbers without a network call.

    CC is the origin country, or EU when it is unknown.
    """

    authority_name = "simulated"

    def register(self, route, countries, transport=None) -> str:
        origin = countries[0] if countries else ""
        code = origin if len(origin) == 2 and origin.isalpha() else "EU"
        serial = f"{secrets.randbelow(10_000_000):07d}"
        reference = f"TRACES.{code}.{timezone.now().year}.{serial}"
        logger.info(f"[SIMULATED TRACES] Issued {reference} for {'/'.join(countries)}")
        return reference


class HttpAuthority(BaseAuthority):
    """Registers transports with an HTTP endpoint.

    POSTs the route as JSON to <url>/registrations and expects
    {"reference_number": "..."} back.
    """

    authority_name = "http"

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url or authority_url()
        self.token = token if token is not None else authority_token()
        self.client = httpx.Client(
            timeout=timeout if timeout is not None else authority_timeout(),
            transport=transport,
        )

    def _payload(self, route, countries, transport):
        payload = {
            "distance_km": route.distance_km,
            "countries": list(countries),
            "border_crossing": route.border_crossing,
        }
        if transport is not None:
            payload.update({
                "transport_id": str(transport.pk),
                "from": transport.from_location,
                "to": transport.to_location,
                "departure_at": transport.departure_at.isoformat() if transport.departure_at else None,
                "vehicle": transport.vehicle.license_plate,
                "horses": [h.ueln or h.name for h in transport.horses.all()],
            })
        return payload

    def register(self, route, countries, transport=None) -> str:
        if not self.base_url:
            raise AuthorityError("No authority URL configured")

        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        try:
            response = self.client.post(
                f"{self.base_url}/registrations",
                headers=headers,
                json=self._payload(route, countries, transport),
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise AuthorityError(f"Timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise AuthorityError(f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise AuthorityError(str(e)) from e

        reference = data.get("reference_number") if isinstance(data, dict) else None
        if not reference:
            raise AuthorityError("Response did not contain a reference number")
        return str(reference)

    def close(self):
        self.client.close()


def get_authority() -> BaseAuthority:
    """Instantiate the configured authority."""
    return load_class(authority_path(), BaseAuthority)()
