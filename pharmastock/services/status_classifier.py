"""Derive inventory status tags for a drug lot.

Rules, in precedence order:

1. A real expiry date strictly before today tags the lot ``EXPIRED``.
2. Otherwise a real expiry date inside ``[today, today + N calendar months]``
   tags it ``NEARING_EXPIRY``.
3. Unless the lot is expired and the policy suppresses stock tags, exactly one
   of ``TO_REORDER`` (stock 0), ``LOW_STOCK`` (stock below threshold) or
   ``OVERSTOCK`` (threshold > 0 and stock above threshold * factor) may apply.
4. A lot with no tag from the steps above is ``IN_STOCK``.

Expiry tags come first in the result, then the stock tag.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping

from dateutil.relativedelta import relativedelta


class StatusTag(str, enum.Enum):
    EXPIRED = 'expired'
    NEARING_EXPIRY = 'nearing_expiry'
    TO_REORDER = 'a_commander'
    LOW_STOCK = 'low_stock'
    OVERSTOCK = 'surstock'
    IN_STOCK = 'in_stock'

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    StatusTag.EXPIRED: 'Expired',
    StatusTag.NEARING_EXPIRY: 'Nearing expiry',
    StatusTag.TO_REORDER: 'To reorder',
    StatusTag.LOW_STOCK: 'Low stock',
    StatusTag.OVERSTOCK: 'Overstock',
    StatusTag.IN_STOCK: 'In stock',
}

STOCK_LEVEL_TAGS = frozenset({StatusTag.TO_REORDER, StatusTag.LOW_STOCK, StatusTag.OVERSTOCK})


@dataclass(frozen=True)
class ClassificationPolicy:
    nearing_expiry_months: int = 3
    overstock_factor: int = 3
    expired_suppresses_stock_tags: bool = True

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ClassificationPolicy":
        return cls(
            nearing_expiry_months=int(config.get('NEARING_EXPIRY_MONTHS', 3)),
            overstock_factor=int(config.get('OVERSTOCK_FACTOR', 3)),
            expired_suppresses_stock_tags=bool(config.get('EXPIRED_SUPPRESSES_STOCK_TAGS', True)),
        )


DEFAULT_POLICY = ClassificationPolicy()


def _as_date(value) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def nearing_expiry_limit(today: date, months: int = 3) -> date:
    """Last day of the nearing-expiry window (calendar months, clamped to month end)."""
    return today + relativedelta(months=months)


def is_expired(lot, today: date) -> bool:
    expiry = _as_date(lot.expiry_date)
    return expiry is not None and expiry < today


def is_nearing_expiry(lot, today: date, months: int = 3) -> bool:
    expiry = _as_date(lot.expiry_date)
    if expiry is None or expiry < today:
        return False
    return expiry <= nearing_expiry_limit(today, months)


def stock_level_tag(current_stock: int, low_stock_threshold: int, overstock_factor: int = 3) -> StatusTag | None:
    current_stock = current_stock or 0
    low_stock_threshold = low_stock_threshold or 0
    if current_stock == 0:
        return StatusTag.TO_REORDER
    if current_stock < low_stock_threshold:
        return StatusTag.LOW_STOCK
    if low_stock_threshold > 0 and current_stock > low_stock_threshold * overstock_factor:
        return StatusTag.OVERSTOCK
    return None


def classify(lot, today: date, policy: ClassificationPolicy = DEFAULT_POLICY) -> tuple[StatusTag, ...]:
    """Return the ordered status tags of ``lot`` as of ``today``."""
    tags: list[StatusTag] = []

    expired = is_expired(lot, today)
    if expired:
        tags.append(StatusTag.EXPIRED)
    elif is_nearing_expiry(lot, today, policy.nearing_expiry_months):
        tags.append(StatusTag.NEARING_EXPIRY)

    if not (expired and policy.expired_suppresses_stock_tags):
        stock_tag = stock_level_tag(lot.current_stock, lot.low_stock_threshold, policy.overstock_factor)
        if stock_tag is not None:
            tags.append(stock_tag)

    if not tags:
        tags.append(StatusTag.IN_STOCK)
    return tuple(tags)


def status_labels(tags) -> list[str]:
    return [tag.label for tag in tags]
