"""Configuration for equiroute-traces."""

from equiroute_core.conf import get_setting

DEFAULT_AUTHORITY = "equiroute_traces.authorities.SimulatedAuthority"


def authority_path() -> str:
    return get_setting("TRACES_AUTHORITY", DEFAULT_AUTHORITY)


def authority_url() -> str:
    return (get_setting("TRACES_AUTHORITY_URL", "") or "").rstrip("/")


def authority_token() -> str:
    return get_setting("TRACES_AUTHORITY_TOKEN", "")


def authority_timeout() -> float:
    return get_setting("TRACES_TIMEOUT", 30.0)
