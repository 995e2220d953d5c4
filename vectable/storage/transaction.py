"""
All-or-Nothing Transaction Runner

Wraps a sequence of backend writes in begin/commit. Any Err returned, or
exception raised, by the sequence rolls the transaction back in full
before the failure is surfaced; the original error is preserved.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from vectable.core.errors import Err, Result, VectorTableError
from vectable.core.protocols import StorageBackendProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_in_transaction(
    backend: StorageBackendProtocol,
    operation: Callable[[], Result[T, VectorTableError]],
    *,
    label: str = "transaction",
) -> Result[T, VectorTableError]:
    """
    Execute operation inside a single backend transaction.

    Args:
        backend: Storage backend owning the session
        operation: Callable issuing the writes; returns Ok or Err
        label: Operation name for log records

    Returns:
        operation's Ok after a successful commit, otherwise the first Err
    """
    begun = backend.begin()
    if begun.is_err():
        return begun

    try:
        result = operation()
    except Exception:
        _rollback(backend, label, reason="exception")
        raise

    if result.is_err():
        _rollback(backend, label, reason=str(result.error))
        return result

    committed = backend.commit()
    if committed.is_err():
        _rollback(backend, label, reason=str(committed.error))
        return Err(committed.error)

    return result


def _rollback(backend: StorageBackendProtocol, label: str, reason: str) -> None:
    logger.warning(
        "Rolling back %s",
        label,
        extra={"operation": label, "reason": reason},
    )
    rolled_back = backend.rollback()
    if rolled_back.is_err():
        logger.error(
            "Rollback of %s failed",
            label,
            extra={"operation": label, "error": rolled_back.error.to_dict()},
        )
