"""Helper modules for error classification."""

from .data_classes import RETRYABLE_KINDS, USER_MESSAGES, ClassifiedError, ErrorKind
from .error_categorizer import ErrorCategorizer

__all__ = ["ClassifiedError", "ErrorCategorizer", "ErrorKind", "RETRYABLE_KINDS", "USER_MESSAGES"]
