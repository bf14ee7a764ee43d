"""Operation context management for partsampler logging.

This module provides context managers for tracking the sampling operation
currently running on a thread and its retry attempts, so that every
diagnostic emitted during a retry loop can be traced back to its call.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class AttemptContext:
    """Context for one attempt of a retryable distributed step.

    Attributes:
        number: Attempt number (0 for the first run).
        seed: Seed used by this attempt.
    """

    number: int
    seed: int | None = None

@dataclass
class OperationState:
    """State for a single sampling operation.

    Attributes:
        operation_id: Unique operation identifier.
        operation: Operation name (e.g. "stratified").
        seed: Seed the caller supplied.
        start_time: Operation start timestamp.
        attempt: Current attempt context (if retrying).
        parent: Enclosing operation when operations nest.
        extra: Additional operation-level metadata.
    """

    operation_id: str
    operation: str
    seed: int | None = None
    start_time: datetime = field(default_factory=datetime.now)
    attempt: AttemptContext | None = None
    parent: OperationState | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> list[str]:
        """Get the nested operation path, outermost first."""
        names = []
        state: OperationState | None = self
        while state is not None:
            names.append(state.operation)
            state = state.parent
        return names[::-1]

class _ContextStorage(threading.local):
    """Thread-local storage for operation context."""

    def __init__(self) -> None:
        super().__init__()
        self.state: OperationState | None = None

_context = _ContextStorage()

def get_current_state() -> OperationState | None:
    """Get the operation state of the calling thread.

    Returns:
        Current OperationState or None if not inside an operation.
    """
    return _context.state

def _generate_operation_id() -> str:
    """Generate a unique operation ID in format "S-HHMMSS-XXXX"."""
    timestamp = datetime.now().strftime("%H%M%S")
    suffix = uuid.uuid4().hex[:4]
    return f"S-{timestamp}-{suffix}"

class LogContext:
    """Context manager for operation-level logging context.

    Example:
        >>> with LogContext("stratified", seed=42):
        ...     with LogContext.attempt(1, seed=43):
        ...         logger.info("Re-doing stratified sampling")
    """

    def __init__(
        self,
        operation: str,
        seed: int | None = None,
        operation_id: str | None = None,
        **extra: Any,
    ) -> None:
        self.operation = operation
        self.seed = seed
        self.operation_id = operation_id
        self.extra = extra
        self._previous_state: OperationState | None = None

    def __enter__(self) -> OperationState:
        self._previous_state = _context.state
        # Nested operations share the id of the outermost call
        if self.operation_id is None and self._previous_state is not None:
            operation_id = self._previous_state.operation_id
        else:
            operation_id = self.operation_id or _generate_operation_id()
        state = OperationState(
            operation_id=operation_id,
            operation=self.operation,
            seed=self.seed,
            parent=self._previous_state,
            extra=self.extra,
        )
        _context.state = state
        return state

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        _context.state = self._previous_state

    @staticmethod
    @contextmanager
    def attempt(number: int, seed: int | None = None) -> Generator[AttemptContext, None, None]:
        """Context manager for tracking one attempt of a retry loop.

        Args:
            number: Attempt number (0-based).
            seed: Seed used by the attempt.

        Yields:
            AttemptContext for the attempt.
        """
        attempt_ctx = AttemptContext(number=number, seed=seed)
        state = get_current_state()
        if state is None:
            yield attempt_ctx
            return

        previous = state.attempt
        state.attempt = attempt_ctx
        try:
            yield attempt_ctx
        finally:
            state.attempt = previous

def inject_context(record: logging.LogRecord) -> logging.LogRecord:
    """Inject the current operation context into a log record.

    Args:
        record: Log record to inject context into.

    Returns:
        Modified log record with context fields.
    """
    state = get_current_state()
    if state is None:
        return record

    record.operation_id = state.operation_id
    record.operation = "/".join(state.path)
    if state.attempt is not None:
        record.attempt = state.attempt.number
        record.attempt_seed = state.attempt.seed
    return record
