"""
Error classification for price API failures.

Normalizes raw exceptions (and the plain error objects older callers pass
around) into a ``ClassifiedError`` carrying the kind, a retryability verdict
and a user-facing message. Classification is a pure mapping: no I/O, and the
same error shape always yields the same verdict.
"""

import logging
from typing import Any

from .error_classifier_helpers import ClassifiedError, ErrorCategorizer, ErrorKind
from .error_classifier_helpers.error_categorizer import extract_status

logger = logging.getLogger(__name__)

_MAX_DETAIL_LENGTH = 200


class ErrorClassifier:
    """Maps raw failures onto the error taxonomy."""

    def classify(self, raw_error: Any) -> ClassifiedError:
        if isinstance(raw_error, ClassifiedError):
            return raw_error

        kind = ErrorCategorizer.categorize(raw_error)
        classified = ClassifiedError.of(
            kind,
            status=extract_status(raw_error),
            error_type=type(raw_error).__name__,
            detail=str(raw_error)[:_MAX_DETAIL_LENGTH],
        )
        logger.debug(
            "Classified %s as %s (retryable=%s)",
            classified.error_type,
            classified.describe(),
            classified.retryable,
        )
        return classified


def classify_error(raw_error: Any) -> ClassifiedError:
    """Module-level convenience wrapper around ``ErrorClassifier.classify``."""
    return ErrorClassifier().classify(raw_error)


__all__ = ["ClassifiedError", "ErrorClassifier", "ErrorKind", "classify_error"]
