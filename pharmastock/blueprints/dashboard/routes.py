import logging

from flask import current_app
from flask_login import login_required

from . import dashboard_bp
from ...extensions import cache
from ...services.cache_invalidation import dashboard_cache_key
from ...services.reporting import build_dashboard
from ...services.snapshots import load_distributions, load_lots, load_services
from ...utils.api_responses import APIResponse
from ...utils.timezone_utils import TimezoneUtils

logger = logging.getLogger(__name__)


@dashboard_bp.route('', methods=['GET'])
@login_required
def summary():
    """Metrics, totals by service and top distributed items"""
    key = dashboard_cache_key()
    payload = cache.get(key)
    if payload is None:
        payload = build_dashboard(
            load_lots(),
            load_services(),
            load_distributions(),
            TimezoneUtils.today(),
            current_app.config,
        )
        cache.set(key, payload, timeout=int(current_app.config.get('DASHBOARD_CACHE_SECONDS', 30)))
        logger.debug("Dashboard summary rebuilt")
    return APIResponse.success(payload)
