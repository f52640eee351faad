from flask import Blueprint

suggestions_bp = Blueprint('suggestions', __name__, url_prefix='/api/suggestions')

# Import routes to register them with the blueprint
from . import routes
