"""Configuration for equiroute-certificates."""

from django.core.files.storage import default_storage

from equiroute_core.conf import get_setting, import_class


def get_certificate_storage():
    """Storage backend for certificate blobs.

    EQUIROUTE_CERTIFICATE_STORAGE may name a Storage subclass by dotted
    path; otherwise Django's default storage is used.
    """
    path = get_setting("CERTIFICATE_STORAGE")
    if not path:
        return default_storage
    return import_class(path)()


def upload_root() -> str:
    return get_setting("CERTIFICATE_UPLOAD_ROOT", "certificates").strip("/")
