"""Route value object shared by compliance evaluation and registration."""

from dataclasses import dataclass, field

from .countries import country_codes


@dataclass(frozen=True)
class Route:
    """Distance and ordered countries of a transport.

    border_crossing defaults to "more than one distinct country on the
    route"; pass it explicitly when the map provider says otherwise.
    """

    distance_km: float
    countries: tuple = ()
    border_crossing: bool = None
    country_codes: tuple = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "countries", tuple(self.countries or ()))
        object.__setattr__(self, "country_codes", tuple(country_codes(self.countries)))
        if self.border_crossing is None:
            object.__setattr__(self, "border_crossing", len(set(self.country_codes)) > 1)

    @property
    def origin_code(self) -> str:
        return self.country_codes[0] if self.country_codes else ""
