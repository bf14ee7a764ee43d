"""Core infrastructure: exceptions and logging."""

from .exceptions import FrameReleasedError, InvalidInputError, SamplingError

__all__ = [
    "SamplingError",
    "InvalidInputError",
    "FrameReleasedError",
]
