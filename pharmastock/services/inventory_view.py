"""Request-level glue between snapshot reads and the pure inventory filters."""
from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from ..utils.validation_helpers import clean_text
from .inventory_filters import (
    AdvancedFilter,
    RotationWindows,
    filter_lots,
    parse_primary_filter,
    rotation_bucket,
    search_lots,
)
from .snapshots import load_lots
from .status_classifier import ClassificationPolicy, classify, status_labels


def lots_for_request(args: Mapping[str, Any], config: Mapping[str, Any], today: date) -> list:
    """Lots matching the inventory query parameters, in display order.

    Raises ``ValidationError`` for an unknown primary filter; every other
    unparseable parameter is ignored.
    """
    primary = parse_primary_filter(args.get('filter'))
    advanced = AdvancedFilter.from_args(args)
    lots = filter_lots(
        load_lots(),
        primary,
        advanced,
        today=today,
        policy=ClassificationPolicy.from_config(config),
        rotation=RotationWindows.from_config(config),
    )

    query = clean_text(args.get('q'))
    if query is not None and len(query) > 1:
        lots = search_lots(lots, query, limit=len(lots))
    return lots


def lot_view(lot, today: date, config: Mapping[str, Any]) -> dict:
    tags = classify(lot, today, ClassificationPolicy.from_config(config))
    bucket = rotation_bucket(lot.updated_at, today, RotationWindows.from_config(config))
    data = lot.to_dict()
    data['statuses'] = [tag.value for tag in tags]
    data['status_labels'] = status_labels(tags)
    data['rotation'] = bucket.value if bucket else None
    return data
