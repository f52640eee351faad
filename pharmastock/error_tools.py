import logging

from flask import request
from flask_wtf.csrf import CSRFError
from sqlalchemy.exc import DBAPIError, OperationalError

from .extensions import db, login_manager
from .services.errors import PharmacyStockError
from .utils.api_responses import APIResponse
from .utils.error_messages import ErrorMessages as EM

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    """Map the stock error taxonomy and infrastructure failures onto the JSON envelope."""

    @app.teardown_request
    def _rollback_on_error(exc):
        if exc is not None:
            db.session.rollback()

    @app.errorhandler(PharmacyStockError)
    def _stock_error_handler(err: PharmacyStockError):
        logger.debug("%s on %s: %s", type(err).__name__, request.path, err.message)
        return APIResponse.from_exception(err)

    @app.errorhandler(OperationalError)
    @app.errorhandler(DBAPIError)
    def _db_error_handler(err):
        db.session.rollback()
        logger.error("Database error on %s: %s", request.path, err)
        return APIResponse.error(EM.STORE_UNAVAILABLE, status_code=503)

    @app.errorhandler(CSRFError)
    def _csrf_error_handler(err: CSRFError):
        details = {
            "path": request.path,
            "endpoint": request.endpoint,
            "reason": err.description,
        }
        logger.warning("CSRF validation failed: %s", details)
        return APIResponse.error("CSRF validation failed. Please refresh and try again.", status_code=400)

    @app.errorhandler(404)
    def _not_found(error):
        return APIResponse.not_found("Page")

    @app.errorhandler(405)
    def _method_not_allowed(error):
        return APIResponse.error("Method not allowed.", status_code=405)

    @app.errorhandler(429)
    def _rate_limited(error):
        return APIResponse.error(f"Too many requests: {error.description}", status_code=429)

    @login_manager.unauthorized_handler
    def _unauthorized():
        return APIResponse.error("Authentication required.", status_code=401)
