"""
Centralized Error Messages

Single source of truth for user-facing messages.

Usage:
    from pharmastock.utils.error_messages import ErrorMessages as EM

    raise ValidationError('quantity', EM.QUANTITY_MIN)
    raise InsufficientStockError(lot.id, requested=6, available=4)  # uses EM.INSUFFICIENT_STOCK
"""


class ErrorMessages:
    """User-facing error messages - never contain HTML or special characters"""

    # ==================== GENERIC ====================
    VALIDATION_FAILED = "Validation failed."
    INTERNAL_ERROR = "Internal server error."
    STORE_UNAVAILABLE = "The stock database is temporarily unavailable. Please resubmit."
    STORE_CONFLICT = "Stock was changed by someone else too many times. Please resubmit."
    FIELD_REQUIRED = "{field} is required."

    # ==================== QUANTITIES ====================
    QUANTITY_REQUIRED = "Quantity is required."
    QUANTITY_INVALID = "Quantity must be a whole number."
    QUANTITY_MIN = "Quantity must be at least 1."
    THRESHOLD_INVALID = "Low stock threshold must be a whole number greater than or equal to 0."
    STOCK_INVALID = "Current stock must be a whole number greater than or equal to 0."
    INSUFFICIENT_STOCK = "Insufficient stock. Only {available} available."

    # ==================== LOTS ====================
    BARCODE_REQUIRED = "Barcode is required."
    DESIGNATION_REQUIRED = "Designation is required."
    EXPIRY_INVALID = "Expiry date must be YYYY-MM-DD or N/A."
    LOT_NOT_FOUND = "Drug lot not found."
    BARCODE_NOT_FOUND = "Invalid barcode. Drug not found."
    LOT_SELECTION_REQUIRED = "Several lots share this barcode. Select a lot: {lots}"

    # ==================== SERVICES ====================
    SERVICE_REQUIRED = "Service is required."
    SERVICE_NOT_FOUND = "Service not found."
    SERVICE_NAME_REQUIRED = "Service name is required."
    SERVICE_NAME_TAKEN = "A service named {name} already exists."

    # ==================== FILTERS ====================
    FILTER_UNKNOWN = "Unknown inventory filter {value}. Expected one of: {choices}"

    # ==================== SUGGESTIONS ====================
    SUGGESTION_FAILED = "Failed to get suggestion from AI model."
    SUGGESTION_DISABLED = "Stock suggestions are disabled."
    SUGGESTION_NOT_CONFIGURED = "Stock suggestions are not configured."

    # ==================== ALERTS ====================
    ALERT_KEYS_REQUIRED = "At least one alert key is required."


class SuccessMessages:
    STOCK_RECEIVED = "{quantity} units of {designation} added to stock."
    STOCK_DISTRIBUTED = "{quantity} units of {designation} distributed."
    LOT_UPDATED = "Drug lot updated."
    SERVICE_CREATED = "\"{name}\" has been added."
    SERVICE_DELETED = "Service deleted."
    ALERTS_MARKED_READ = "Alerts marked as read."
    ALERTS_CLEARED = "Read markers cleared."
