"""
Transaction helpers shared by the store and the service layer.
"""

import logging
from contextlib import contextmanager

from django.db import InterfaceError, OperationalError, transaction

from .exceptions import NotFound, TransientStorageError
from .models import Resource

logger = logging.getLogger(__name__)


@contextmanager
def storage_guard(operation: str, **context):
    """
    Re-raise infrastructure failures as TransientStorageError.

    Domain errors and integrity errors pass through untouched.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.error(
            "scheduling_storage_failed",
            extra={
                'operation': operation,
                'error': str(exc),
                'error_type': type(exc).__name__,
                **context,
            },
        )
        raise TransientStorageError(
            f"Storage unavailable during {operation}; the request can be retried",
            details={'operation': operation, **context},
        ) from exc


@contextmanager
def locked_resource(resource_id, operation: str):
    """
    Open a transaction and hold the write lock on one resource row.

    Every check-then-act sequence against a resource (booking, cancelling,
    enrolling, replacing availability) runs inside this block, so concurrent
    writers on the same resource are serialized while other resources
    proceed in parallel.
    """
    with storage_guard(operation, resource_id=resource_id):
        with transaction.atomic():
            try:
                resource = Resource.objects.lock(resource_id)
            except Resource.DoesNotExist:
                raise NotFound(
                    f"Resource {resource_id} does not exist",
                    details={'resource_id': resource_id},
                )
            yield resource
