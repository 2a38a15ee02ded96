"""Configuration for equiroute-orgs."""

import string

from equiroute_core.conf import get_setting


def org_code_length() -> int:
    return get_setting("ORG_CODE_LENGTH", 6)


def org_code_alphabet() -> str:
    return get_setting("ORG_CODE_ALPHABET", string.ascii_uppercase + string.digits)


def org_code_max_attempts() -> int:
    return get_setting("ORG_CODE_MAX_ATTEMPTS", 10)


def invitation_ttl_days() -> int:
    return get_setting("INVITATION_TTL_DAYS", 7)
