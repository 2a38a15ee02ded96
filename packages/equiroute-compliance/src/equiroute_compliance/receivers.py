"""Keep stored confirmations in step with certificate changes."""

import logging

from django.dispatch import receiver

from equiroute_certificates.signals import (
    certificate_deleted,
    certificate_updated,
    certificate_uploaded,
)
from equiroute_transports.selectors import get_open_transports_for_entity

from .models import TransportCompliance

logger = logging.getLogger(__name__)


@receiver(certificate_uploaded)
@receiver(certificate_updated)
@receiver(certificate_deleted)
def refresh_affected_transports(sender, entity_type=None, entity_id=None, **kwargs):
    """Re-reconcile open transports that involve the certificate's entity."""
    from .services import refresh_confirmations

    transports = get_open_transports_for_entity(entity_type, entity_id).filter(
        pk__in=TransportCompliance.objects.values("transport_id"),
    )
    for transport in transports:
        refresh_confirmations(transport)
        logger.debug(f"Refreshed compliance of transport {transport.pk} after {entity_type} {entity_id} changed")
