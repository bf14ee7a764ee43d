"""
Exception hierarchy for partsampler.

Invalid inputs are fatal to the current call and are raised before any
partition work starts. Unlucky random draws are never raised; they are
retried and reported through logging.
"""


class SamplingError(Exception):
    """Base exception for sampling errors."""
    pass

class InvalidInputError(SamplingError, ValueError):
    """Raised when a frame, column or ratio vector cannot be sampled."""
    pass

class FrameReleasedError(SamplingError):
    """Raised when a released frame is accessed."""
    pass
