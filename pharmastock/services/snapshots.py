"""Pull-based snapshot reads of the stock tables.

The pure classifier, filter and reporting functions operate on plain lists;
these helpers are the only place that turns table reads into those lists.
"""
from __future__ import annotations

from typing import Optional

from ..extensions import db
from ..models import Distribution, DrugLot, Service

_LOT_ORDER_FIELDS = {
    'designation': DrugLot.designation,
    'barcode': DrugLot.barcode,
    'expiry_date': DrugLot.expiry_date,
    'current_stock': DrugLot.current_stock,
    'created_at': DrugLot.created_at,
    'updated_at': DrugLot.updated_at,
}

_DISTRIBUTION_ORDER_FIELDS = {
    'date': Distribution.date,
    'quantity_distributed': Distribution.quantity_distributed,
    'item_name': Distribution.item_name,
    'service_name': Distribution.service_name,
}


def _ordered(query, column, tiebreak, direction: str, limit: Optional[int]):
    if direction == 'desc':
        query = query.order_by(column.desc(), tiebreak.desc())
    else:
        query = query.order_by(column.asc(), tiebreak.asc())
    if limit is not None and limit > 0:
        query = query.limit(limit)
    return list(db.session.execute(query).scalars())


def load_lots(order_by: str = 'designation', direction: str = 'asc', limit: Optional[int] = None) -> list[DrugLot]:
    column = _LOT_ORDER_FIELDS.get(order_by, DrugLot.designation)
    return _ordered(db.select(DrugLot), column, DrugLot.id, direction, limit)


def load_services() -> list[Service]:
    return list(db.session.execute(db.select(Service).order_by(Service.name.asc(), Service.id.asc())).scalars())


def load_distributions(order_by: str = 'date', direction: str = 'desc', limit: Optional[int] = None) -> list[Distribution]:
    column = _DISTRIBUTION_ORDER_FIELDS.get(order_by, Distribution.date)
    return _ordered(db.select(Distribution), column, Distribution.id, direction, limit)
