from flask import Blueprint

alerts_bp = Blueprint('alerts', __name__, url_prefix='/api/alerts')

# Import routes to register them with the blueprint
from . import routes
