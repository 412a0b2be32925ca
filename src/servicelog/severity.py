"""
Severity levels.
"""

from enum import Enum


class Severity(str, Enum):
    DEBUG = "DEBUG"
    ERROR = "ERROR"
    TRACE = "TRACE"

    @property
    def label(self) -> str:
        return self.value

    @property
    def method_name(self) -> str:
        """Name of the logger method (and sink router method) for this level."""
        return self.value.lower()

    @property
    def uses_error_sink(self) -> bool:
        # TRACE shares the debug sink
        return self is Severity.ERROR

    @classmethod
    def from_method_name(cls, method_name: str) -> "Severity":
        return cls(method_name.upper())
