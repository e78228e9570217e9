# re-export common schemas for simpler imports
from .URLInfoResponse import URLInfoResponse
from .URLStatsResponse import URLStatsResponse
from .ErrorResponse import ErrorResponse

__all__ = [
    "URLInfoResponse",
    "URLStatsResponse",
    "ErrorResponse",
]
