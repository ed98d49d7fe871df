import logging

from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class SourceUnavailable(APIException):
    """An external data source could not be fetched or parsed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "External data source unavailable"
    default_code = "source_unavailable"


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Country not found"
    default_code = "not_found"


class ValidationFailed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation failed"
    default_code = "invalid"


class MalformedRecord(ValueError):
    """A single raw country payload cannot be turned into a record."""


# Generic "error" text per status; "message" carries the detail.
ERROR_TITLES = {
    status.HTTP_400_BAD_REQUEST: "Validation failed",
    status.HTTP_404_NOT_FOUND: "Country not found",
    status.HTTP_503_SERVICE_UNAVAILABLE: "External data source unavailable",
}

# Details for these statuses may carry upstream/internal text.
DEBUG_ONLY_DETAIL = {status.HTTP_503_SERVICE_UNAVAILABLE, status.HTTP_500_INTERNAL_SERVER_ERROR}


def _detail_text(detail):
    if isinstance(detail, (list, dict)):
        return detail
    return str(detail)


def api_exception_handler(exc, context):
    """
    Render every error as {"error": ..., "message": ...}.

    Internal detail (upstream failures, crashes) is only exposed when
    DEBUG is on.
    """
    response = exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled error in %s", context.get("view"), exc_info=exc)
        message = str(exc) if settings.DEBUG else "An unexpected error occurred"
        return Response(
            {"error": "Internal server error", "message": message},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    code = response.status_code
    if code in DEBUG_ONLY_DETAIL and not settings.DEBUG:
        message = getattr(exc, "default_detail", "An unexpected error occurred")
    else:
        message = _detail_text(getattr(exc, "detail", exc))

    response.data = {
        "error": ERROR_TITLES.get(code, "Request failed"),
        "message": message,
    }
    return response
