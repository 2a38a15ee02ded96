"""Country name to ISO 3166-1 alpha-2 code lookup.

Route countries arrive as free text from map lookups, in English or
Danish. Unknown names pass through uppercased.
"""

COUNTRY_CODES = {
    "denmark": "DK",
    "danmark": "DK",
    "germany": "DE",
    "tyskland": "DE",
    "deutschland": "DE",
    "sweden": "SE",
    "sverige": "SE",
    "norway": "NO",
    "norge": "NO",
    "france": "FR",
    "frankrig": "FR",
    "netherlands": "NL",
    "the netherlands": "NL",
    "holland": "NL",
    "nederland": "NL",
    "belgium": "BE",
    "belgien": "BE",
    "poland": "PL",
    "polen": "PL",
    "austria": "AT",
    "østrig": "AT",
    "switzerland": "CH",
    "schweiz": "CH",
    "italy": "IT",
    "italien": "IT",
    "spain": "ES",
    "spanien": "ES",
    "united kingdom": "GB",
    "uk": "GB",
    "england": "GB",
    "great britain": "GB",
    "britain": "GB",
    "storbritannien": "GB",
}

KNOWN_CODES = frozenset(COUNTRY_CODES.values())


def country_code(name: str) -> str:
    """ISO code for a country name or code; unknown names are uppercased."""
    normalized = " ".join((name or "").split()).lower()
    if not normalized:
        return ""
    if normalized.upper() in KNOWN_CODES:
        return normalized.upper()
    return COUNTRY_CODES.get(normalized, normalized.upper())


def country_codes(names) -> list[str]:
    """Codes for a route's countries in order, dropping blanks."""
    return [code for code in (country_code(name) for name in names or ()) if code]
