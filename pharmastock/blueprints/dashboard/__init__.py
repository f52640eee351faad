from flask import Blueprint

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/api/dashboard')

# Import routes to register them with the blueprint
from . import routes
