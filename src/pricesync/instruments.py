"""
Instrument code and display name mapping.

The supported set is the six LME base metals. The mapping is total and
injective over that set; anything outside it falls back to an identity
transform instead of raising, so a newly listed metal still renders.
"""

from __future__ import annotations

from typing import Dict, Tuple

COPPER = "CU"
ALUMINUM = "AL"
ZINC = "ZN"
LEAD = "PB"
NICKEL = "NI"
TIN = "SN"

SUPPORTED_CODES: Tuple[str, ...] = (COPPER, ALUMINUM, ZINC, LEAD, NICKEL, TIN)

_CODE_TO_NAME: Dict[str, str] = {
    COPPER: "구리",
    ALUMINUM: "알루미늄",
    ZINC: "아연",
    LEAD: "납",
    NICKEL: "니켈",
    TIN: "주석",
}

_NAME_TO_CODE: Dict[str, str] = {name: code for code, name in _CODE_TO_NAME.items()}

# Legacy English identifiers still sent by older clients
_ALIASES: Dict[str, str] = {
    "copper": COPPER,
    "aluminum": ALUMINUM,
    "aluminium": ALUMINUM,
    "zinc": ZINC,
    "lead": LEAD,
    "nickel": NICKEL,
    "tin": TIN,
}


def display_name(code: str) -> str:
    """Return the display name for ``code`` or ``code`` itself when unknown."""
    return _CODE_TO_NAME.get(code, code)


def code_for_name(name: str) -> str:
    """Return the instrument code for a display name or ``name`` itself when unknown."""
    return _NAME_TO_CODE.get(name, name)


def normalize_code(value: str) -> str:
    """
    Normalize a code, display name or legacy alias to the canonical code.

    Unknown values are upper-cased and returned unchanged otherwise.
    """
    candidate = value.strip()
    if candidate in _NAME_TO_CODE:
        return _NAME_TO_CODE[candidate]
    lowered = candidate.lower()
    if lowered in _ALIASES:
        return _ALIASES[lowered]
    return candidate.upper()


def is_supported(code: str) -> bool:
    return code in _CODE_TO_NAME


__all__ = [
    "ALUMINUM",
    "COPPER",
    "LEAD",
    "NICKEL",
    "SUPPORTED_CODES",
    "TIN",
    "ZINC",
    "code_for_name",
    "display_name",
    "is_supported",
    "normalize_code",
]
