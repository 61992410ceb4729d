from .date_helpers import DateHelpers
from .constants import AppConstants, ResponseMessages
from .validation import ValidationHelpers

__all__ = [
    "DateHelpers",
    "AppConstants", "ResponseMessages",
    "ValidationHelpers",
]
