# orders/views/errors.py

from rest_framework import status
from rest_framework.response import Response

from orders.services.exceptions import OrderServiceError


# ======================================================
# API ERROR NORMALIZATION
# ======================================================

def error_response(*, code: str, message: str, http_status: int, details=None):
    """
    Canonical API error response.
    """
    body = {"error": {"code": code, "message": message}}
    if details:
        body["error"]["details"] = details
    return Response(body, status=http_status)


def service_error_response(exc: OrderServiceError):
    return error_response(
        code=exc.code,
        message=exc.message or str(exc),
        http_status=exc.http_status,
        details=exc.details,
    )


def invalid_payload_response(errors):
    return error_response(
        code="VALIDATION_ERROR",
        message="Invalid request payload.",
        http_status=status.HTTP_400_BAD_REQUEST,
        details=errors,
    )
