from flask import Blueprint

stock_bp = Blueprint('stock', __name__, url_prefix='/api')

# Import routes to register them with the blueprint
from . import routes
