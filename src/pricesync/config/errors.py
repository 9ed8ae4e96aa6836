"""Configuration failures raised while building settings and component policies."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is missing, malformed or outside its allowed range."""

    @classmethod
    def missing_value(cls, param_name: str, context: str = "") -> "ConfigurationError":
        suffix = f": {context}" if context else ""
        return cls(f"{param_name} is missing or empty{suffix}")

    @classmethod
    def invalid_value(cls, param_name: str, value, reason: str = "") -> "ConfigurationError":
        suffix = f". {reason}" if reason else ""
        return cls(f"Invalid value for {param_name}: {value!r}{suffix}")

    @classmethod
    def non_positive(cls, param_name: str, value) -> "ConfigurationError":
        return cls.invalid_value(param_name, value, "Must be greater than zero")

    @classmethod
    def unknown_profile(cls, name: str, known) -> "ConfigurationError":
        return cls(f"Unknown runtime profile {name!r} (expected one of: {', '.join(sorted(known))})")


__all__ = ["ConfigurationError"]
