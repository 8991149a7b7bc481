"""
Error taxonomy for the pixel analysis engine.

All validation errors are raised before any computation starts. Each class
carries a stable ``code`` so the HTTP layer can report it without parsing
messages.
"""


class AnalysisError(ValueError):
    """Base class for analysis input and degeneracy errors."""
    code = "analysis_error"


class InvalidBufferLength(AnalysisError):
    """Buffer length is not a multiple of 4 (RGBA groups)."""
    code = "invalid_buffer_length"


class EmptyImage(AnalysisError):
    """Zero pixels were supplied where an image is required."""
    code = "empty_image"


class InvalidK(AnalysisError):
    """Cluster count is zero or exceeds the number of pixels."""
    code = "invalid_k"


class DegenerateBalance(AnalysisError):
    """All channel totals are zero, so the color balance is undefined."""
    code = "degenerate_balance"


class DimensionMismatch(AnalysisError):
    """Width x height does not match the pixel count of the buffer."""
    code = "dimension_mismatch"
