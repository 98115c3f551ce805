"""
Diagnostics returned by lifecycle handlers.

A handler reports problems by returning a non-empty Diagnostics list
instead of raising. An empty list means the operation succeeded.
"""

from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    """How serious a diagnostic is."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A single problem reported to the declarative engine."""

    severity: Severity
    summary: str
    detail: str = ""

    def __str__(self) -> str:
        text = f"{self.severity.value}: {self.summary}"
        if self.detail:
            text += f": {self.detail}"
        return text


class Diagnostics(list):
    """
    Ordered collection of Diagnostic entries.

    Example:
        diags = Diagnostics()
        try:
            client.clouds.remove_cloud(RemoveCloudInput(name="lxd"))
        except JujuformError as e:
            return Diagnostics.from_err(e)
        return diags
    """

    @classmethod
    def from_err(cls, err: BaseException) -> "Diagnostics":
        """Wrap an exception as a single error diagnostic, message unchanged."""
        return cls([Diagnostic(severity=Severity.ERROR, summary=str(err))])

    @classmethod
    def errorf(cls, summary: str, *args) -> "Diagnostics":
        """Single error diagnostic from a %-style format string."""
        if args:
            summary = summary % args
        return cls([Diagnostic(severity=Severity.ERROR, summary=summary)])

    def has_error(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self)
