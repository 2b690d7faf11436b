"""
Error Handling Module for HRIS Console

This module provides centralized error handling with:
- Custom exception hierarchy
- Standardized error responses
- Error logging
- Local input validation errors (raised before any backend round trip)
- Backend (REST API) error translation
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Union
import logging

from fastapi import FastAPI, Request, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Configure logging
logger = logging.getLogger("hris.errors")


class ErrorCode(str, Enum):
    """Standardized error codes for the application"""

    # Validation Errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_PERIOD = "INVALID_PERIOD"
    INVALID_CUTOFF_DAY = "INVALID_CUTOFF_DAY"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_OVERTIME_HOURS = "INVALID_OVERTIME_HOURS"
    INVALID_RATE_MULTIPLIER = "INVALID_RATE_MULTIPLIER"
    INVALID_TIME_FORMAT = "INVALID_TIME_FORMAT"

    # Authentication/Authorization Errors (401/403)
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    # Resource Errors (404/409)
    NOT_FOUND = "NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"

    # Business Logic Errors (422)
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"

    # Rate Limiting (429)
    RATE_LIMITED = "RATE_LIMITED"

    # External Service Errors (502/503)
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    BACKEND_API_ERROR = "BACKEND_API_ERROR"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"

    # Internal Errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """Base exception for all application exceptions"""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.field = field
        self.original_error = original_error
        self.timestamp = datetime.utcnow()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        result = {
            "code": self.code.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat() + "Z",
        }
        if self.field:
            result["field"] = self.field
        if self.details:
            result["details"] = self.details
        return result


# ============================================================================
# Validation Exceptions
# ============================================================================

class ValidationException(AppException):
    """Base validation exception"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
            field=field,
        )


class InvalidPeriodException(ValidationException):
    """Invalid payroll period key"""

    def __init__(self, period: Any, message: Optional[str] = None):
        super().__init__(
            message=message or f"Invalid period: {period}. Expected YYYY-MM.",
            field="period",
            code=ErrorCode.INVALID_PERIOD,
            details={"provided_period": str(period), "expected_format": "YYYY-MM"},
        )


class InvalidCutoffDayException(ValidationException):
    """Payroll cutoff day outside the calendar range"""

    def __init__(self, cutoff_day: Any):
        super().__init__(
            message=f"Invalid payroll cutoff day: {cutoff_day}. Must be between 1 and 31.",
            field="cutoff_day",
            code=ErrorCode.INVALID_CUTOFF_DAY,
            details={"provided_cutoff_day": str(cutoff_day)},
        )


class InvalidDateRangeException(ValidationException):
    """Invalid date range"""

    def __init__(
        self,
        start_date: Union[str, date],
        end_date: Union[str, date],
        message: Optional[str] = None,
    ):
        super().__init__(
            message=message or f"Invalid date range: {start_date} to {end_date}. End date must not be before start date.",
            code=ErrorCode.INVALID_DATE_RANGE,
            details={"start_date": str(start_date), "end_date": str(end_date)},
        )


class InvalidAmountException(ValidationException):
    """Invalid monetary amount"""

    def __init__(self, amount: Any, field: str = "amount", message: Optional[str] = None):
        super().__init__(
            message=message or f"Invalid amount: {amount}. Amount must be a positive number.",
            field=field,
            code=ErrorCode.INVALID_AMOUNT,
            details={"provided_amount": str(amount)},
        )


class InvalidOvertimeHoursException(ValidationException):
    """Overtime hours outside the accepted range"""

    def __init__(self, hours: Any, max_hours: Any):
        super().__init__(
            message=f"Overtime hours must be greater than 0 and at most {max_hours}. Got {hours}.",
            field="hours",
            code=ErrorCode.INVALID_OVERTIME_HOURS,
            details={"provided_hours": str(hours), "max_hours": str(max_hours)},
        )


class InvalidRateMultiplierException(ValidationException):
    """Overtime rate multiplier not in the allowed set"""

    def __init__(self, multiplier: Any, allowed: Any):
        super().__init__(
            message=f"Invalid overtime rate multiplier: {multiplier}.",
            field="rate_multiplier",
            code=ErrorCode.INVALID_RATE_MULTIPLIER,
            details={"provided_multiplier": str(multiplier), "allowed": [str(m) for m in allowed]},
        )


class InvalidTimeFormatException(ValidationException):
    """Clock time not in HH:MM format"""

    def __init__(self, value: Any, field: str = "time"):
        super().__init__(
            message=f"Invalid time: {value}. Expected HH:MM.",
            field=field,
            code=ErrorCode.INVALID_TIME_FORMAT,
            details={"provided": str(value)},
        )


# ============================================================================
# Resource Exceptions
# ============================================================================

class NotFoundException(AppException):
    """Resource not found exception"""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[Union[str, int]] = None,
        message: Optional[str] = None,
    ):
        if message is None:
            if resource_id is not None:
                message = f"{resource_type} with ID '{resource_id}' not found"
            else:
                message = f"{resource_type} not found"
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": str(resource_id) if resource_id is not None else None},
        )


# ============================================================================
# Business Logic Exceptions
# ============================================================================

class BusinessRuleException(AppException):
    """Business rule violation exception"""

    def __init__(
        self,
        message: str,
        rule: Optional[str] = None,
        code: ErrorCode = ErrorCode.BUSINESS_RULE_VIOLATION,
        details: Optional[Dict[str, Any]] = None,
    ):
        _details = details or {}
        if rule:
            _details["violated_rule"] = rule
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=_details,
        )


class InvalidTransitionException(BusinessRuleException):
    """Status change not allowed by the record's workflow"""

    def __init__(self, workflow: str, current_status: str, action: str):
        super().__init__(
            message=f"Cannot {action} {workflow} in '{current_status}' status",
            rule=f"{workflow}_status_pipeline",
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            details={"workflow": workflow, "current_status": current_status, "action": action},
        )


# ============================================================================
# External Service Exceptions
# ============================================================================

class ExternalServiceException(AppException):
    """External service error exception"""

    def __init__(
        self,
        service_name: str,
        message: str,
        code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR,
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        original_error: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        _details = details or {}
        _details["service"] = service_name
        super().__init__(
            code=code,
            message=message,
            status_code=status_code,
            details=_details,
            original_error=original_error,
        )


class BackendAPIException(ExternalServiceException):
    """The HRIS backend answered with an error status.

    The backend's own message is kept verbatim so it can be shown to the user.
    """

    def __init__(
        self,
        message: str,
        backend_status: int,
        errors: Optional[list] = None,
    ):
        details: Dict[str, Any] = {"backend_status": backend_status}
        if errors:
            details["errors"] = errors
        # Client errors pass through with their own status, server errors become 502
        status_code = backend_status if 400 <= backend_status < 500 else status.HTTP_502_BAD_GATEWAY
        super().__init__(
            service_name="HRIS API",
            message=message,
            code=ErrorCode.BACKEND_API_ERROR,
            status_code=status_code,
            details=details,
        )
        self.backend_status = backend_status


class BackendUnavailableException(ExternalServiceException):
    """The HRIS backend could not be reached"""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(
            service_name="HRIS API",
            message=message,
            code=ErrorCode.BACKEND_UNAVAILABLE,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            original_error=original_error,
        )


class RateLimitException(BackendAPIException):
    """Backend rejected the request with 429"""

    def __init__(self, message: str = "Too many requests. Please slow down.", retry_after: Optional[int] = None):
        super().__init__(message=message, backend_status=status.HTTP_429_TOO_MANY_REQUESTS)
        self.code = ErrorCode.RATE_LIMITED
        if retry_after is not None:
            self.details["retry_after_seconds"] = retry_after
        self.retry_after = retry_after


# ============================================================================
# Exception Handlers
# ============================================================================

def create_error_response(
    code: ErrorCode,
    message: str,
    status_code: int,
    details: Optional[Dict[str, Any]] = None,
    field: Optional[str] = None,
) -> JSONResponse:
    """Create a standardized error response"""
    content = {
        "success": False,
        "error": {
            "code": code.value,
            "message": message,
            "timestamp": datetime.utcnow().isoformat() + "Z",
        },
    }
    if field:
        content["error"]["field"] = field
    if details:
        content["error"]["details"] = details

    return JSONResponse(status_code=status_code, content=content)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle AppException"""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"AppException: {exc.code.value} - {exc.message}",
        extra={
            "code": exc.code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
        },
        exc_info=exc.original_error,
    )

    return create_error_response(
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        field=exc.field,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTPException"""
    code_map = {
        400: ErrorCode.INVALID_INPUT,
        401: ErrorCode.UNAUTHORIZED,
        403: ErrorCode.FORBIDDEN,
        404: ErrorCode.NOT_FOUND,
        409: ErrorCode.RESOURCE_CONFLICT,
        422: ErrorCode.VALIDATION_ERROR,
        429: ErrorCode.RATE_LIMITED,
        502: ErrorCode.EXTERNAL_SERVICE_ERROR,
        503: ErrorCode.EXTERNAL_SERVICE_ERROR,
    }

    error_code = code_map.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    logger.warning(
        f"HTTPException: {exc.status_code} - {message}",
        extra={"path": request.url.path, "method": request.method},
    )

    return create_error_response(
        code=error_code,
        message=message,
        status_code=exc.status_code,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors"""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    logger.warning(
        f"ValidationError: {len(errors)} validation errors",
        extra={"path": request.url.path, "method": request.method, "errors": errors},
    )

    return create_error_response(
        code=ErrorCode.VALIDATION_ERROR,
        message="Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details={"errors": errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions"""
    logger.critical(
        f"UnhandledException: {type(exc).__name__} - {str(exc)}",
        extra={"path": request.url.path, "method": request.method},
        exc_info=True,
    )

    return create_error_response(
        code=ErrorCode.INTERNAL_ERROR,
        message="An unexpected error occurred. Please try again later.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application"""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


# ============================================================================
# Utility Functions
# ============================================================================

def validate_amount(amount: Any, field: str = "amount", allow_zero: bool = False) -> float:
    """Validate monetary amount"""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise InvalidAmountException(amount, field)
    if value != value or value < 0 or (not allow_zero and value == 0):
        raise InvalidAmountException(amount, field)
    return value


def validate_date_range(start_date: date, end_date: date) -> None:
    """End date may equal start date but never precede it"""
    if end_date < start_date:
        raise InvalidDateRangeException(start_date, end_date)


def validate_required(value: Any, field: str) -> Any:
    """Reject None and blank strings"""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationException(
            message=f"{field} is required",
            field=field,
            code=ErrorCode.MISSING_FIELD,
        )
    return value


__all__ = [
    # Base
    "AppException",
    "ErrorCode",

    # Validation
    "ValidationException",
    "InvalidPeriodException",
    "InvalidCutoffDayException",
    "InvalidDateRangeException",
    "InvalidAmountException",
    "InvalidOvertimeHoursException",
    "InvalidRateMultiplierException",
    "InvalidTimeFormatException",

    # Resource
    "NotFoundException",

    # Business Logic
    "BusinessRuleException",
    "InvalidTransitionException",

    # External Services
    "ExternalServiceException",
    "BackendAPIException",
    "BackendUnavailableException",
    "RateLimitException",

    # Handlers
    "setup_exception_handlers",
    "create_error_response",

    # Utilities
    "validate_amount",
    "validate_date_range",
    "validate_required",
]
