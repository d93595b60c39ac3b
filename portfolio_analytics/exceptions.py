"""
Analytics Errors
Error kinds reported synchronously by every engine in the package
"""

from typing import Any, Dict


class AnalyticsError(Exception):
    """Base analytics error"""

    kind = "analytics_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class InsufficientDataError(AnalyticsError):
    """Not enough usable data to compute the requested measure"""

    kind = "insufficient_data"


class InvalidParameterError(AnalyticsError, ValueError):
    """A caller-supplied parameter is outside its valid range"""

    kind = "invalid_parameter"


class DegenerateInputError(AnalyticsError):
    """Inputs are structurally inconsistent or contain non-finite values"""

    kind = "degenerate_input"
