import logging

from django.db import DatabaseError
from rest_framework.views import exception_handler as drf_exception_handler

from exams.exceptions import InternalPersistenceError

logger = logging.getLogger(__name__)


def exception_handler(exc, context):
    """
    DRF exception handler that adds ``code`` (plus ``row``/``limit`` where
    the error carries them) to the response body, and reports database
    failures as a 500 persistence error instead of an unhandled crash.
    """
    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.error(f"Database error in {view.__class__.__name__ if view else 'unknown view'}: {exc}", exc_info=exc)
        exc = InternalPersistenceError()

    response = drf_exception_handler(exc, context)
    if response is None or not isinstance(response.data, dict) or 'detail' not in response.data:
        return response

    response.data['code'] = getattr(response.data['detail'], 'code', None) or getattr(exc, 'default_code', 'error')
    row_number = getattr(exc, 'row_number', None)
    if row_number is not None:
        response.data['row'] = row_number
    limit = getattr(exc, 'limit', None)
    if limit is not None:
        response.data['limit'] = limit
    return response
