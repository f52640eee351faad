import logging

from .extensions import csrf

logger = logging.getLogger(__name__)


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    from .blueprints.alerts import alerts_bp
    from .blueprints.dashboard import dashboard_bp
    from .blueprints.exports import exports_bp
    from .blueprints.hospital_services import hospital_services_bp
    from .blueprints.inventory import inventory_bp
    from .blueprints.stock import stock_bp
    from .blueprints.suggestions import suggestions_bp

    # JSON endpoints authenticate via the session cookie and never render forms.
    json_api_blueprints = (
        inventory_bp,
        stock_bp,
        hospital_services_bp,
        dashboard_bp,
        suggestions_bp,
        alerts_bp,
    )
    for blueprint in json_api_blueprints:
        csrf.exempt(blueprint)
        app.register_blueprint(blueprint)

    app.register_blueprint(exports_bp)

    logger.info("Registered %s blueprints", len(json_api_blueprints) + 1)
