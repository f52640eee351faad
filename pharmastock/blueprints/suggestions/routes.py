from flask import current_app
from flask_login import login_required

from . import suggestions_bp
from ...extensions import db, limiter
from ...models import DrugLot
from ...services.errors import NotFoundError, ValidationError
from ...services.suggestion_service import StockSuggestionService
from ...utils.api_responses import APIResponse
from ...utils.error_messages import ErrorMessages as EM
from ...utils.validation_helpers import clean_text, parse_optional_int


def _suggestion_rate_limit() -> str:
    return current_app.config.get('SUGGESTION_RATE_LIMIT') or '20 per minute'


def _suggestion_input(data):
    """(drug name, current stock, expiry) from a lot id or from explicit fields"""
    if data.get('lot_id') not in (None, ''):
        lot_id = parse_optional_int(data.get('lot_id'))
        lot = db.session.get(DrugLot, lot_id) if lot_id is not None else None
        if lot is None:
            raise NotFoundError('drug_lot', 'lot_id', EM.LOT_NOT_FOUND)
        return lot.designation, lot.current_stock, lot.expiry_display

    drug_name = clean_text(data.get('drugName'))
    if drug_name is None:
        raise ValidationError('drugName', EM.FIELD_REQUIRED.format(field='drugName'))
    current_stock = parse_optional_int(data.get('currentStock'))
    if current_stock is None or current_stock < 0:
        raise ValidationError('currentStock', EM.STOCK_INVALID)
    expiry_date = clean_text(data.get('expiryDate')) or 'N/A'
    return drug_name, current_stock, expiry_date


@suggestions_bp.route('', methods=['POST'])
@login_required
@limiter.limit(_suggestion_rate_limit)
def suggest():
    """Ask the AI model for a stock adjustment on one lot"""
    data = APIResponse.handle_request_content()
    drug_name, current_stock, expiry_date = _suggestion_input(data)
    suggestion = StockSuggestionService().suggest(drug_name, current_stock, expiry_date)
    return APIResponse.success(suggestion.to_dict())
