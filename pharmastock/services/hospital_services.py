"""Directory of hospital services (departments) that receive distributions."""
from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import Service
from ..utils.error_messages import ErrorMessages as EM
from ..utils.validation_helpers import clean_text, parse_optional_int
from .cache_invalidation import invalidate_dashboard_cache
from .errors import NotFoundError, StoreTransactionError, ValidationError
from .snapshots import load_services

logger = logging.getLogger(__name__)


def list_services() -> list[Service]:
    return load_services()


def create_service(name) -> Service:
    cleaned = clean_text(name)
    if cleaned is None:
        raise ValidationError('name', EM.SERVICE_NAME_REQUIRED)

    clash = db.session.execute(
        db.select(Service.id).where(func.lower(Service.name) == cleaned.lower())
    ).first()
    if clash is not None:
        raise ValidationError('name', EM.SERVICE_NAME_TAKEN.format(name=cleaned))

    service = Service(name=cleaned)
    db.session.add(service)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError('name', EM.SERVICE_NAME_TAKEN.format(name=cleaned)) from None
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreTransactionError(EM.STORE_UNAVAILABLE) from exc

    logger.info("Created hospital service %s (%s)", service.id, cleaned)
    invalidate_dashboard_cache()
    return service


def delete_service(service_id) -> None:
    """Remove a service. Past distributions keep their recorded service id and name."""
    sid = parse_optional_int(service_id)
    service = db.session.get(Service, sid) if sid is not None else None
    if service is None:
        raise NotFoundError('service', 'service_id', EM.SERVICE_NOT_FOUND)

    db.session.delete(service)
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreTransactionError(EM.STORE_UNAVAILABLE) from exc

    logger.info("Deleted hospital service %s", sid)
    invalidate_dashboard_cache()
