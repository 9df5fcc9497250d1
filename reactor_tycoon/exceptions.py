"""
Custom exceptions for the reactor tycoon engine.

The simulation itself never raises: guarded operations report failure with a
boolean and out-of-range inputs are clamped. Exceptions are reserved for
problems detected while building the engine (bad configuration).
"""


class ReactorTycoonError(Exception):
    """Base exception for all reactor tycoon errors."""
    pass


class ConfigurationError(ReactorTycoonError, ValueError):
    """Invalid plant configuration."""

    def __init__(self, section: str, errors):
        self.section = section
        self.errors = list(errors)
        message = f"{section} configuration validation failed:\n" + \
            "\n".join(f"  - {error}" for error in self.errors)
        super().__init__(message)
