from flask import current_app, request
from flask_login import current_user, login_required

from . import stock_bp
from ...services.snapshots import load_distributions
from ...services.stock_mutation import distribute_stock, receive_stock
from ...utils.api_responses import APIResponse
from ...utils.error_messages import SuccessMessages
from ...utils.validation_helpers import parse_optional_int


@stock_bp.route('/stock/receive', methods=['POST'])
@login_required
def receive():
    """Receive stock for a barcode; creates the lot on first receipt"""
    data = APIResponse.handle_request_content()
    receipt = receive_stock(
        barcode=data.get('barcode'),
        designation=data.get('designation'),
        quantity=data.get('quantity'),
        lot_number=data.get('lot_number'),
        expiry_date=data.get('expiry_date'),
        category=data.get('category'),
        low_stock_threshold=data.get('low_stock_threshold'),
        user_id=current_user.id,
    )
    return APIResponse.success(
        {'lot': receipt.lot.to_dict(), 'created': receipt.created},
        message=SuccessMessages.STOCK_RECEIVED.format(
            quantity=receipt.quantity, designation=receipt.lot.designation
        ),
        status_code=201 if receipt.created else 200,
    )


@stock_bp.route('/stock/distribute', methods=['POST'])
@login_required
def distribute():
    """Distribute stock from one lot to a hospital service"""
    data = APIResponse.handle_request_content()
    entry = distribute_stock(
        quantity=data.get('quantity'),
        service_id=data.get('service_id'),
        lot_id=data.get('lot_id'),
        barcode=data.get('barcode'),
        lot_number=data.get('lot_number'),
        user_id=current_user.id,
    )
    return APIResponse.success(
        entry.to_dict(),
        message=SuccessMessages.STOCK_DISTRIBUTED.format(
            quantity=entry.quantity_distributed, designation=entry.item_name
        ),
        status_code=201,
    )


@stock_bp.route('/distributions', methods=['GET'])
@login_required
def recent_distributions():
    default_limit = int(current_app.config.get('RECENT_DISTRIBUTIONS_LIMIT', 10))
    limit = parse_optional_int(request.args.get('limit'))
    if limit is None or limit <= 0:
        limit = default_limit
    entries = load_distributions(limit=limit)
    return APIResponse.success({'distributions': [entry.to_dict() for entry in entries]})
