from flask import Blueprint

exports_bp = Blueprint('exports', __name__, url_prefix='/exports')

# Import routes to register them with the blueprint
from . import routes
