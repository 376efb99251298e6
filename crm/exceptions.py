"""Service errors and the custom exception handler for the CRM REST API."""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = 500


class BackendError(ServiceError):
    """The hosted backend rejected or failed a query, RPC or storage call."""

    status_code = 502


class BackendUnavailable(ServiceError):
    """No backend client could be configured."""

    status_code = 503


class RecordNotFound(ServiceError):
    """The record does not exist or lies outside the requester's scope."""

    status_code = 404


def custom_exception_handler(exc, context):
    """Translate service and Django errors into REST framework responses.

    Django ``ValidationError`` becomes a 400, ``Http404`` a 404 and
    :class:`ServiceError` subclasses use their ``status_code``. Anything else
    follows DRF's default behaviour.
    """
    if isinstance(exc, DjangoValidationError):
        exc = DRFValidationError(detail=exc.messages)

    if isinstance(exc, Http404):
        return Response({"detail": "Not found.", "status_code": 404}, status=404)

    if isinstance(exc, ServiceError):
        return Response(
            {"detail": str(exc) or exc.__class__.__name__, "status_code": exc.status_code},
            status=exc.status_code,
        )

    response = exception_handler(exc, context)

    # If DRF handled the exception, return its response. Otherwise, return None
    # for a 500 server error.
    if response is not None:
        if not isinstance(response.data, dict):
            response.data = {"detail": response.data}
        response.data["status_code"] = response.status_code

    return response
