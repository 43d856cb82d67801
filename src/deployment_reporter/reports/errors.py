from __future__ import annotations


class ReportError(RuntimeError):
    """Base class for failures that abort report generation."""


class IntrospectionError(ReportError):
    """A published file could not be read or summarized."""


class ReportWriteError(ReportError):
    """The report document could not be written to its output file."""


class LifecycleError(ReportError):
    """The session protocol was violated by the caller."""
