from flask import current_app, request
from flask_login import login_required

from . import inventory_bp
from ...services.inventory_filters import distinct_categories, search_lots
from ...services.inventory_view import lot_view, lots_for_request
from ...services.snapshots import load_lots
from ...services.stock_mutation import update_lot_metadata
from ...utils.api_responses import APIResponse
from ...utils.error_messages import SuccessMessages
from ...utils.timezone_utils import TimezoneUtils

_EDITABLE_FIELDS = ('designation', 'category', 'low_stock_threshold')


@inventory_bp.route('', methods=['GET'])
@login_required
def list_inventory():
    """Inventory table: primary filter, advanced criteria and optional text query"""
    today = TimezoneUtils.today()
    config = current_app.config
    lots = lots_for_request(request.args, config, today)
    return APIResponse.success({
        'today': today.isoformat(),
        'count': len(lots),
        'lots': [lot_view(lot, today, config) for lot in lots],
    })


@inventory_bp.route('/categories', methods=['GET'])
@login_required
def list_categories():
    return APIResponse.success({'categories': distinct_categories(load_lots())})


@inventory_bp.route('/search', methods=['GET'])
@login_required
def quick_search():
    limit = int(current_app.config.get('SEARCH_RESULT_LIMIT', 5))
    today = TimezoneUtils.today()
    matches = search_lots(load_lots(), request.args.get('q'), limit=limit)
    return APIResponse.success({'lots': [lot_view(lot, today, current_app.config) for lot in matches]})


@inventory_bp.route('/<int:lot_id>', methods=['PATCH'])
@login_required
def edit_lot(lot_id):
    payload = APIResponse.handle_request_content()
    changes = {field: payload[field] for field in _EDITABLE_FIELDS if field in payload}
    lot = update_lot_metadata(lot_id, **changes)
    return APIResponse.success(
        lot_view(lot, TimezoneUtils.today(), current_app.config),
        message=SuccessMessages.LOT_UPDATED,
    )
