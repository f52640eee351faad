from flask import current_app, request
from flask_login import current_user, login_required

from . import alerts_bp
from ...services.alert_service import (
    build_alerts,
    clear_read_markers,
    mark_alerts_read,
    read_alert_keys,
    unread_alerts,
)
from ...services.snapshots import load_lots
from ...services.status_classifier import ClassificationPolicy
from ...utils.api_responses import APIResponse
from ...utils.error_messages import SuccessMessages
from ...utils.timezone_utils import TimezoneUtils

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@alerts_bp.route('', methods=['GET'])
@login_required
def list_alerts():
    """Inventory alerts with their read state for the current user"""
    alerts = build_alerts(
        load_lots(),
        TimezoneUtils.today(),
        ClassificationPolicy.from_config(current_app.config),
    )
    read_keys = read_alert_keys(current_user.id)
    unread = unread_alerts(alerts, read_keys)

    if (request.args.get('unread') or '').strip().lower() in _TRUE_VALUES:
        visible = unread
    else:
        visible = [dict(alert, read=alert['key'] in read_keys) for alert in alerts]

    return APIResponse.success({
        'alerts': visible,
        'total_alerts': len(alerts),
        'unread_count': len(unread),
    })


@alerts_bp.route('/read', methods=['POST'])
@login_required
def mark_read():
    data = APIResponse.handle_request_content()
    keys = data.get('keys')
    if keys is None and data.get('key'):
        keys = [data.get('key')]
    added = mark_alerts_read(current_user.id, keys)
    return APIResponse.success({'marked': added}, message=SuccessMessages.ALERTS_MARKED_READ)


@alerts_bp.route('/clear', methods=['POST'])
@login_required
def clear_read():
    removed = clear_read_markers(current_user.id)
    return APIResponse.success({'cleared': removed}, message=SuccessMessages.ALERTS_CLEARED)
