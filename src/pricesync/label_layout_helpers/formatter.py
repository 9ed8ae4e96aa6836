"""Period-specific label compaction."""

import re

from ..data_models import ChartPeriod

_YEAR_MONTH = re.compile(r"^(\d{4})/(\d{2})$")
_FULL_DATE = re.compile(r"^(\d{4})[/-](\d{2})[/-](\d{2})$")


class LabelFormatter:
    """Shortens labels by dropping or truncating the year; other labels pass through."""

    @staticmethod
    def compact(label: str, period: ChartPeriod) -> str:
        text = label.strip()
        if period is ChartPeriod.MONTHLY:
            match = _YEAR_MONTH.match(text)
            if match:
                return f"{match.group(1)[-2:]}/{match.group(2)}"
            match = _FULL_DATE.match(text)
            if match:
                return f"{match.group(1)[-2:]}/{match.group(2)}"
            return text
        match = _FULL_DATE.match(text)
        if match:
            return f"{match.group(2)}/{match.group(3)}"
        return text

    @classmethod
    def format(cls, label: str, period: ChartPeriod, compact: bool) -> str:
        return cls.compact(label, period) if compact else label


__all__ = ["LabelFormatter"]
