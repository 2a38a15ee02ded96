"""Signals sent when the certificate set of an entity changes.

Receivers get entity_type and entity_id keyword arguments, plus the
certificate (uploaded, updated) or certificate_id (deleted).
"""

from django.dispatch import Signal

certificate_uploaded = Signal()
certificate_deleted = Signal()
certificate_updated = Signal()
