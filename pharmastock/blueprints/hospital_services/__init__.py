from flask import Blueprint

hospital_services_bp = Blueprint('hospital_services', __name__, url_prefix='/api/services')

# Import routes to register them with the blueprint
from . import routes
