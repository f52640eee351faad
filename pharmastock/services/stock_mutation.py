"""Stock-changing operations: receipts, distributions and lot metadata edits.

Every operation runs as one database transaction that re-reads the lot row
(``populate_existing`` plus ``FOR UPDATE`` where the backend supports it) before
deciding anything. ``DrugLot.version_id`` makes the final UPDATE conditional, so
a concurrent writer that slipped in between read and write surfaces as a
``StaleDataError``; the whole unit of work is then rolled back and replayed
against the fresh row.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from flask import current_app, has_app_context
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..models import Distribution, DrugLot, Service
from ..utils.error_messages import ErrorMessages as EM
from ..utils.validation_helpers import NOT_APPLICABLE_TOKENS, clean_text, parse_optional_date
from .cache_invalidation import invalidate_dashboard_cache
from .errors import (
    InsufficientStockError,
    NotFoundError,
    PharmacyStockError,
    StoreTransactionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = [
    "StockReceipt",
    "receive_stock",
    "distribute_stock",
    "update_lot_metadata",
    "parse_quantity",
    "parse_expiry",
    "parse_threshold",
]


@dataclass(slots=True)
class StockReceipt:
    lot: DrugLot
    created: bool
    quantity: int


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

def _parse_whole_number(value, field: str, message: str) -> int:
    if value is None or isinstance(value, bool):
        raise ValidationError(field, message)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(field, message)
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        raise ValidationError(field, message) from None


def parse_quantity(value, field: str = 'quantity') -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(field, EM.QUANTITY_REQUIRED)
    quantity = _parse_whole_number(value, field, EM.QUANTITY_INVALID)
    if quantity < 1:
        raise ValidationError(field, EM.QUANTITY_MIN)
    return quantity


def parse_threshold(value, field: str = 'low_stock_threshold') -> int:
    threshold = _parse_whole_number(value, field, EM.THRESHOLD_INVALID)
    if threshold < 0:
        raise ValidationError(field, EM.THRESHOLD_INVALID)
    return threshold


def parse_expiry(value, field: str = 'expiry_date'):
    """``YYYY-MM-DD`` becomes a date; blank or ``N/A`` means the lot does not expire."""
    text = clean_text(value)
    if text is None or text.lower() in NOT_APPLICABLE_TOKENS:
        return None
    parsed = parse_optional_date(value)
    if parsed is None:
        raise ValidationError(field, EM.EXPIRY_INVALID)
    return parsed


def _parse_id(value, field: str, missing_message: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(field, missing_message)
    return _parse_whole_number(value, field, missing_message)


# ---------------------------------------------------------------------------
# Transaction plumbing
# ---------------------------------------------------------------------------

def _max_attempts() -> int:
    configured = 3
    if has_app_context():
        configured = current_app.config.get('STOCK_TRANSACTION_MAX_RETRIES', 3)
    return max(int(configured or 1), 1)


def _run_in_transaction(
    work: Callable[[], T],
    *,
    action: str,
    retry_on: tuple = (StaleDataError,),
) -> T:
    """Run ``work`` and commit; replay it on version conflicts, roll back on anything else."""
    attempts = _max_attempts()
    for attempt in range(1, attempts + 1):
        try:
            result = work()
            db.session.commit()
            return result
        except PharmacyStockError:
            db.session.rollback()
            raise
        except retry_on as exc:
            db.session.rollback()
            logger.info("%s hit a concurrent update (attempt %s/%s): %s", action, attempt, attempts, exc)
            continue
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error("%s failed: %s", action, exc)
            raise StoreTransactionError(EM.STORE_UNAVAILABLE) from exc

    logger.warning("%s gave up after %s conflicting attempts", action, attempts)
    raise StoreTransactionError(EM.STORE_CONFLICT)


def _fresh_lots_query(*criteria):
    return (
        db.select(DrugLot)
        .where(*criteria)
        .order_by(DrugLot.id.asc())
        .with_for_update()
        .execution_options(populate_existing=True)
    )


def _locked_lot(lot_id: int) -> Optional[DrugLot]:
    return db.session.execute(_fresh_lots_query(DrugLot.id == lot_id)).scalar_one_or_none()


def _describe_lots(lots) -> str:
    return ', '.join(f"{lot.lot_number or 'no lot number'} (id {lot.id})" for lot in lots)


# ---------------------------------------------------------------------------
# ReceiveStock
# ---------------------------------------------------------------------------

def _match_receipt_lot(barcode: str, lot_number: Optional[str]) -> Optional[DrugLot]:
    candidates = list(db.session.execute(_fresh_lots_query(DrugLot.barcode == barcode)).scalars())
    if lot_number is not None:
        for lot in candidates:
            if lot.lot_number == lot_number:
                return lot
        unnumbered = [lot for lot in candidates if lot.lot_number is None]
        if len(unnumbered) == 1:
            return unnumbered[0]
        return None

    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]
    raise ValidationError('lot_number', EM.LOT_SELECTION_REQUIRED.format(lots=_describe_lots(candidates)))


def receive_stock(
    *,
    barcode,
    designation,
    quantity,
    lot_number=None,
    expiry_date=None,
    category=None,
    low_stock_threshold=None,
    user_id: Optional[int] = None,
) -> StockReceipt:
    """Add ``quantity`` units to the lot identified by barcode and lot number, creating it if unknown.

    Metadata on an existing lot is overwritten by the supplied values. An omitted
    lot number or category leaves the stored one in place. No distribution entry
    is written.
    """
    barcode = clean_text(barcode)
    if barcode is None:
        raise ValidationError('barcode', EM.BARCODE_REQUIRED)
    designation = clean_text(designation)
    if designation is None:
        raise ValidationError('designation', EM.DESIGNATION_REQUIRED)
    qty = parse_quantity(quantity)
    lot_number = clean_text(lot_number)
    category = clean_text(category)
    expiry = parse_expiry(expiry_date)
    threshold = None if low_stock_threshold in (None, '') else parse_threshold(low_stock_threshold)

    def work() -> StockReceipt:
        lot = _match_receipt_lot(barcode, lot_number)
        if lot is None:
            default_threshold = current_app.config.get('DEFAULT_LOW_STOCK_THRESHOLD', 10)
            lot = DrugLot(
                barcode=barcode,
                lot_number=lot_number,
                designation=designation,
                category=category,
                initial_stock=qty,
                current_stock=qty,
                low_stock_threshold=default_threshold if threshold is None else threshold,
                expiry_date=expiry,
            )
            db.session.add(lot)
            db.session.flush()
            return StockReceipt(lot=lot, created=True, quantity=qty)

        lot.current_stock = (lot.current_stock or 0) + qty
        lot.designation = designation
        lot.expiry_date = expiry
        if lot_number is not None:
            lot.lot_number = lot_number
        if category is not None:
            lot.category = category
        if threshold is not None:
            lot.low_stock_threshold = threshold
        return StockReceipt(lot=lot, created=False, quantity=qty)

    receipt = _run_in_transaction(
        work,
        action=f"Receipt of {qty} x {barcode}",
        retry_on=(StaleDataError, IntegrityError),
    )
    logger.info(
        "Received %s x %s into lot %s (%s, created=%s) by user %s",
        qty, barcode, receipt.lot.id, receipt.lot.lot_number or '-', receipt.created, user_id,
    )
    invalidate_dashboard_cache()
    return receipt


# ---------------------------------------------------------------------------
# DistributeStock
# ---------------------------------------------------------------------------

def _resolve_lot_id(lot_id, barcode, lot_number) -> int:
    if lot_id not in (None, ''):
        return _parse_id(lot_id, 'lot_id', EM.LOT_NOT_FOUND)

    barcode = clean_text(barcode)
    if barcode is None:
        raise ValidationError('barcode', EM.BARCODE_REQUIRED)
    query = db.select(DrugLot).where(DrugLot.barcode == barcode)
    lot_number = clean_text(lot_number)
    if lot_number is not None:
        query = query.where(DrugLot.lot_number == lot_number)
    candidates = list(db.session.execute(query.order_by(DrugLot.id.asc())).scalars())

    if not candidates:
        field = 'lot_number' if lot_number is not None else 'barcode'
        message = EM.LOT_NOT_FOUND if lot_number is not None else EM.BARCODE_NOT_FOUND
        raise NotFoundError('drug_lot', field, message)
    if len(candidates) > 1:
        raise ValidationError('lot_number', EM.LOT_SELECTION_REQUIRED.format(lots=_describe_lots(candidates)))
    return candidates[0].id


def _resolve_service(service_id) -> Service:
    sid = _parse_id(service_id, 'service_id', EM.SERVICE_REQUIRED)
    service = db.session.get(Service, sid)
    if service is None:
        raise NotFoundError('service', 'service_id', EM.SERVICE_NOT_FOUND)
    return service


def _fresh_service(service_id: int) -> Service:
    service = db.session.execute(
        db.select(Service)
        .where(Service.id == service_id)
        .with_for_update(read=True)
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if service is None:
        raise NotFoundError('service', 'service_id', EM.SERVICE_NOT_FOUND)
    return service


def distribute_stock(
    *,
    quantity,
    service_id,
    lot_id=None,
    barcode=None,
    lot_number=None,
    user_id: Optional[int] = None,
) -> Distribution:
    """Take ``quantity`` units out of exactly one lot and record the ledger entry.

    The sufficiency check runs against the row as read inside the transaction,
    never against a value the caller already holds. A lot that cannot cover the
    request raises ``InsufficientStockError`` and nothing is written.
    """
    qty = parse_quantity(quantity)
    service = _resolve_service(service_id)
    target_id = _resolve_lot_id(lot_id, barcode, lot_number)
    service_ref = service.id

    def work() -> Distribution:
        lot = _locked_lot(target_id)
        if lot is None:
            raise NotFoundError('drug_lot', 'lot_id', EM.LOT_NOT_FOUND)
        # The service may have been removed since it was resolved above.
        service_name = _fresh_service(service_ref).name
        available = lot.current_stock or 0
        if qty > available:
            logger.warning(
                "Rejected distribution of %s x lot %s to %s: only %s available",
                qty, lot.id, service_name, available,
            )
            raise InsufficientStockError(lot.id, requested=qty, available=available)

        entry = Distribution(
            drug_lot_id=lot.id,
            barcode=lot.barcode,
            item_name=lot.designation,
            lot_number=lot.lot_number,
            quantity_distributed=qty,
            service_id=service_ref,
            service_name=service_name,
            user_id=user_id,
        )
        lot.current_stock = available - qty
        db.session.add(entry)
        return entry

    entry = _run_in_transaction(work, action=f"Distribution of {qty} x lot {target_id}")
    logger.info(
        "Distributed %s x lot %s (%s) to %s by user %s",
        qty, target_id, entry.item_name, entry.service_name, user_id,
    )
    invalidate_dashboard_cache()
    return entry


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

_UNCHANGED = object()


def update_lot_metadata(lot_id, *, designation=_UNCHANGED, category=_UNCHANGED, low_stock_threshold=_UNCHANGED) -> DrugLot:
    """Edit descriptive fields of a lot; quantities are never touched here."""
    target_id = _parse_id(lot_id, 'lot_id', EM.LOT_NOT_FOUND)

    changes = {}
    if designation is not _UNCHANGED:
        cleaned = clean_text(designation)
        if cleaned is None:
            raise ValidationError('designation', EM.DESIGNATION_REQUIRED)
        changes['designation'] = cleaned
    if category is not _UNCHANGED:
        changes['category'] = clean_text(category)
    if low_stock_threshold is not _UNCHANGED:
        changes['low_stock_threshold'] = parse_threshold(low_stock_threshold)

    def work() -> DrugLot:
        lot = _locked_lot(target_id)
        if lot is None:
            raise NotFoundError('drug_lot', 'lot_id', EM.LOT_NOT_FOUND)
        for attribute, value in changes.items():
            setattr(lot, attribute, value)
        return lot

    lot = _run_in_transaction(work, action=f"Metadata update of lot {target_id}")
    if changes:
        logger.info("Updated lot %s metadata: %s", target_id, ', '.join(sorted(changes)))
        invalidate_dashboard_cache()
    return lot
