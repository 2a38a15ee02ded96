"""Requirement evaluation for a route and the entities involved."""

from .rules import (
    BASE_DOCUMENTS,
    BORDER_ADVISORY,
    BORDER_DOCUMENT,
    DISTANCE_DOCUMENT,
    LONG_DISTANCE_ADVISORY,
    SHORT_DISTANCE_ADVISORY,
    distance_threshold_km,
    get_country_rules,
)
from .values import CountryRequirements, RequirementSet


def evaluate(route, entities=None) -> RequirementSet:
    """
    Build the document checklist for a transport.

    The fixed categories come first (base, then distance, then border).
    Countries on the route are visited in travel order and each one
    with rules contributes a bucket; a country listed twice is only
    evaluated once. Duplicate requirement ids across buckets are kept
    in the buckets but all_documents() reports the first occurrence.

    Args:
        route: Route with distance_km, country_codes and border_crossing
        entities: Optional TransportEntities; vehicle_type affects
            truck-only rules

    Returns:
        RequirementSet
    """
    result = RequirementSet()
    result.documents.extend(BASE_DOCUMENTS)

    if route.distance_km > distance_threshold_km():
        result.documents.append(DISTANCE_DOCUMENT)
        result.warnings.append(LONG_DISTANCE_ADVISORY)
    else:
        result.warnings.append(SHORT_DISTANCE_ADVISORY)

    if route.border_crossing:
        result.documents.append(BORDER_DOCUMENT)
        result.warnings.append(BORDER_ADVISORY)

    rules = get_country_rules()
    for code in route.country_codes:
        if code in result.country_specific or code not in rules:
            continue
        bucket = rules[code](entities)
        result.country_specific[code] = CountryRequirements(
            documents=list(bucket.documents),
            warnings=list(bucket.warnings),
        )

    return result
