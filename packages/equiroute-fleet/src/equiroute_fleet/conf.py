"""Configuration for equiroute-fleet."""

from equiroute_core.conf import get_setting

DEFAULT_REGISTRY_URL = "https://v1.motorapi.dk"


def registry_url() -> str:
    return get_setting("VEHICLE_REGISTRY_URL", DEFAULT_REGISTRY_URL).rstrip("/")


def registry_token() -> str:
    return get_setting("VEHICLE_REGISTRY_TOKEN", "")


def registry_timeout() -> float:
    return get_setting("VEHICLE_REGISTRY_TIMEOUT", 10.0)
