"""Inventory view filtering: one primary filter plus AND-ed advanced criteria."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..utils.error_messages import ErrorMessages as EM
from ..utils.timezone_utils import TimezoneUtils
from ..utils.validation_helpers import clean_text, parse_optional_date, parse_optional_int
from .errors import ValidationError
from .status_classifier import DEFAULT_POLICY, ClassificationPolicy, StatusTag, classify


class PrimaryFilter(str, enum.Enum):
    ALL = 'all'
    LOW_STOCK = 'low_stock'
    NEARING_EXPIRY = 'nearing_expiry'
    EXPIRED = 'expired'
    TO_REORDER = 'a_commander'
    OVERSTOCK = 'surstock'


class RotationBucket(str, enum.Enum):
    FAST = 'fast'
    SLOW = 'slow'
    INACTIVE = 'inactive'


_FILTER_TAGS = {
    PrimaryFilter.LOW_STOCK: StatusTag.LOW_STOCK,
    PrimaryFilter.NEARING_EXPIRY: StatusTag.NEARING_EXPIRY,
    PrimaryFilter.EXPIRED: StatusTag.EXPIRED,
    PrimaryFilter.TO_REORDER: StatusTag.TO_REORDER,
    PrimaryFilter.OVERSTOCK: StatusTag.OVERSTOCK,
}

# Stock-priority views never list a lot that is already past its date.
_EXCLUDES_EXPIRED = frozenset({PrimaryFilter.LOW_STOCK, PrimaryFilter.TO_REORDER, PrimaryFilter.OVERSTOCK})


def parse_primary_filter(value) -> PrimaryFilter:
    text = clean_text(value)
    if text is None:
        return PrimaryFilter.ALL
    try:
        return PrimaryFilter(text.lower())
    except ValueError:
        raise ValidationError(
            'filter',
            EM.FILTER_UNKNOWN.format(value=text, choices=', '.join(f.value for f in PrimaryFilter)),
        ) from None


@dataclass(frozen=True)
class RotationWindows:
    fast_days: int = 30
    slow_days: int = 90

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "RotationWindows":
        return cls(
            fast_days=int(config.get('ROTATION_FAST_DAYS', 30)),
            slow_days=int(config.get('ROTATION_SLOW_DAYS', 90)),
        )


DEFAULT_ROTATION = RotationWindows()


@dataclass(frozen=True)
class AdvancedFilter:
    category: Optional[str] = None
    min_quantity: Optional[int] = None
    max_quantity: Optional[int] = None
    created_from: Optional[date] = None
    created_to: Optional[date] = None
    updated_from: Optional[date] = None
    updated_to: Optional[date] = None
    rotation: Optional[RotationBucket] = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "AdvancedFilter":
        """Build criteria from request parameters; unparseable values are ignored."""
        rotation = clean_text(args.get('rotation'))
        try:
            rotation_bucket = RotationBucket(rotation.lower()) if rotation else None
        except ValueError:
            rotation_bucket = None
        category = clean_text(args.get('category'))
        if category and category.lower() == 'all':
            category = None
        return cls(
            category=category,
            min_quantity=parse_optional_int(args.get('min_qty')),
            max_quantity=parse_optional_int(args.get('max_qty')),
            created_from=parse_optional_date(args.get('created_from')),
            created_to=parse_optional_date(args.get('created_to')),
            updated_from=parse_optional_date(args.get('updated_from')),
            updated_to=parse_optional_date(args.get('updated_to')),
            rotation=rotation_bucket,
        )

    @property
    def is_empty(self) -> bool:
        return self == AdvancedFilter()


def rotation_bucket(updated_at, today: date, windows: RotationWindows = DEFAULT_ROTATION) -> Optional[RotationBucket]:
    """Bucket a lot by days since its last update; lots never updated have no bucket."""
    updated_on = TimezoneUtils.local_date(updated_at)
    if updated_on is None:
        return None
    age_days = max((today - updated_on).days, 0)
    if age_days <= windows.fast_days:
        return RotationBucket.FAST
    if age_days <= windows.slow_days:
        return RotationBucket.SLOW
    return RotationBucket.INACTIVE


def _within(value: Optional[date], lower: Optional[date], upper: Optional[date]) -> bool:
    if lower is None and upper is None:
        return True
    if value is None:
        return False
    if lower is not None and value < lower:
        return False
    if upper is not None and value > upper:
        return False
    return True


def matches_advanced(lot, advanced: AdvancedFilter, today: date, windows: RotationWindows = DEFAULT_ROTATION) -> bool:
    if advanced.category is not None and (lot.category or '').strip() != advanced.category:
        return False
    stock = lot.current_stock or 0
    if advanced.min_quantity is not None and stock < advanced.min_quantity:
        return False
    if advanced.max_quantity is not None and stock > advanced.max_quantity:
        return False
    if not _within(TimezoneUtils.local_date(lot.created_at), advanced.created_from, advanced.created_to):
        return False
    if not _within(TimezoneUtils.local_date(lot.updated_at), advanced.updated_from, advanced.updated_to):
        return False
    if advanced.rotation is not None and rotation_bucket(lot.updated_at, today, windows) != advanced.rotation:
        return False
    return True


def matches_primary(tags: Sequence[StatusTag], primary: PrimaryFilter) -> bool:
    if primary is PrimaryFilter.ALL:
        return True
    if primary in _EXCLUDES_EXPIRED and StatusTag.EXPIRED in tags:
        return False
    return _FILTER_TAGS[primary] in tags


def filter_lots(
    lots: Iterable,
    primary: PrimaryFilter = PrimaryFilter.ALL,
    advanced: Optional[AdvancedFilter] = None,
    *,
    today: date,
    policy: ClassificationPolicy = DEFAULT_POLICY,
    rotation: RotationWindows = DEFAULT_ROTATION,
) -> list:
    """Apply the primary filter then the advanced criteria; sort per the primary filter.

    Input order is kept except for ``nearing_expiry`` (soonest expiry first) and
    ``expired`` (most recently expired first). Ties keep input order.
    """
    advanced = advanced or AdvancedFilter()
    selected = [
        lot for lot in lots
        if matches_primary(classify(lot, today, policy), primary)
        and matches_advanced(lot, advanced, today, rotation)
    ]

    if primary is PrimaryFilter.NEARING_EXPIRY:
        selected.sort(key=lambda lot: lot.expiry_date)
    elif primary is PrimaryFilter.EXPIRED:
        selected.sort(key=lambda lot: lot.expiry_date, reverse=True)
    return selected


def search_lots(lots: Iterable, query, limit: int = 5) -> list:
    """Quick search by designation substring or exact barcode; needs at least two characters."""
    text = clean_text(query)
    if text is None or len(text) < 2 or limit <= 0:
        return []
    needle = text.lower()
    results = []
    for lot in lots:
        if needle in (lot.designation or '').lower() or text == lot.barcode:
            results.append(lot)
            if len(results) >= limit:
                break
    return results


def distinct_categories(lots: Iterable) -> list[str]:
    return sorted({lot.category.strip() for lot in lots if lot.category and lot.category.strip()}, key=str.lower)
