"""Inventory alerts derived from lot status, plus the per-user "read" set."""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import AlertReadMarker
from ..utils.error_messages import ErrorMessages as EM
from .errors import StoreTransactionError, ValidationError
from .status_classifier import DEFAULT_POLICY, ClassificationPolicy, StatusTag, classify

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {'CRITICAL': 0, 'HIGH': 1, 'MEDIUM': 2, 'LOW': 3}

_ALERT_RULES = {
    StatusTag.EXPIRED: ('CRITICAL', 'Expired lot', '{designation} expired on {expiry}'),
    StatusTag.TO_REORDER: ('CRITICAL', 'Out of stock', '{designation} is out of stock and must be reordered'),
    StatusTag.NEARING_EXPIRY: ('HIGH', 'Expiring soon', '{designation} expires on {expiry}'),
    StatusTag.LOW_STOCK: ('HIGH', 'Low stock', '{designation} is running low ({stock} left, threshold {threshold})'),
}


def alert_key(tag: StatusTag, lot_id) -> str:
    return f"{tag.value}:{lot_id}"


def build_alerts(lots: Iterable, today: date, policy: ClassificationPolicy = DEFAULT_POLICY) -> list[dict]:
    """One alert per lot and alert-worthy tag, most urgent first, then by designation."""
    alerts = []
    for lot in lots:
        for tag in classify(lot, today, policy):
            rule = _ALERT_RULES.get(tag)
            if rule is None:
                continue
            priority, title, template = rule
            alerts.append({
                'key': alert_key(tag, lot.id),
                'type': tag.value,
                'priority': priority,
                'title': title,
                'message': template.format(
                    designation=lot.designation,
                    expiry=lot.expiry_display,
                    stock=lot.current_stock,
                    threshold=lot.low_stock_threshold,
                ),
                'lot_id': lot.id,
                'barcode': lot.barcode,
                'designation': lot.designation,
            })

    alerts.sort(key=lambda alert: (PRIORITY_ORDER.get(alert['priority'], 3), (alert['designation'] or '').lower()))
    return alerts


def unread_alerts(alerts: Iterable[dict], read_keys) -> list[dict]:
    read = set(read_keys or ())
    return [alert for alert in alerts if alert['key'] not in read]


def read_alert_keys(user_id: int) -> set[str]:
    rows = db.session.execute(
        db.select(AlertReadMarker.alert_key).where(AlertReadMarker.user_id == user_id)
    ).scalars()
    return set(rows)


def _normalize_keys(keys) -> list[str]:
    if isinstance(keys, str):
        keys = [keys]
    cleaned = []
    for key in keys or ():
        text = str(key).strip() if key is not None else ''
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


def mark_alerts_read(user_id: int, keys) -> int:
    """Persist read markers for ``keys``; already-read keys are skipped. Returns how many were added."""
    wanted = _normalize_keys(keys)
    if not wanted:
        raise ValidationError('keys', EM.ALERT_KEYS_REQUIRED)

    existing = read_alert_keys(user_id)
    added = 0
    for key in wanted:
        if key in existing:
            continue
        db.session.add(AlertReadMarker(user_id=user_id, alert_key=key))
        added += 1

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreTransactionError(EM.STORE_UNAVAILABLE) from exc

    logger.debug("User %s marked %s alert(s) read", user_id, added)
    return added


def clear_read_markers(user_id: int) -> int:
    try:
        result = db.session.execute(
            db.delete(AlertReadMarker).where(AlertReadMarker.user_id == user_id)
        )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreTransactionError(EM.STORE_UNAVAILABLE) from exc
    return result.rowcount or 0
