from flask import jsonify, request, Response
from typing import Any, Dict, Optional, List

from .error_messages import ErrorMessages as EM


class APIResponse:
    """Standardized API response handler"""

    @staticmethod
    def success(data: Any = None, message: str = "Success", status_code: int = 200) -> Response:
        """Standard success response"""
        response_data = {
            'success': True,
            'message': message,
            'data': data
        }
        return jsonify(response_data), status_code

    @staticmethod
    def error(message: str, errors: Optional[Dict] = None, status_code: int = 400) -> Response:
        """Standard error response"""
        response_data = {
            'success': False,
            'message': message,
            'errors': errors or {}
        }
        return jsonify(response_data), status_code

    @staticmethod
    def validation_error(errors: Dict[str, List[str]], message: str = EM.VALIDATION_FAILED) -> Response:
        """Validation error response"""
        return APIResponse.error(
            message=message,
            errors=errors,
            status_code=422
        )

    @staticmethod
    def not_found(resource: str = "Resource") -> Response:
        """404 error response"""
        return APIResponse.error(
            message=f"{resource} not found",
            status_code=404
        )

    @staticmethod
    def from_exception(exc) -> Response:
        """Envelope for a PharmacyStockError, keyed by the offending field when there is one"""
        return APIResponse.error(
            message=exc.message,
            errors=exc.errors(),
            status_code=exc.status_code
        )

    @staticmethod
    def handle_request_content():
        """Smart request content handling"""
        if request.is_json:
            return request.get_json(silent=True) or {}
        elif request.form:
            return request.form.to_dict()
        else:
            return {}
