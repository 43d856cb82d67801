"""Deployment report generation.

A report lists every artifact a build session installed or deployed, with a
content summary per artifact:
- archives: entry name -> uncompressed size, ascending by entry name
- descriptors: the full file text
- anything else: null

Output is deterministic JSON so that reports of two builds can be compared
with ordinary line-based diff tools.
"""

from .accumulator import ReportAccumulator
from .config import ReporterConfig, resolve_reporter_config
from .errors import IntrospectionError, LifecycleError, ReportError, ReportWriteError
from .introspect import ContentIntrospector
from .lifecycle import ReportLifecycle
from .serializer import FileSink, LogSink, ReportSerializer
from .types import (
    ArtifactKind,
    ArtifactPublished,
    DeploymentRecord,
    DeploymentReport,
    LifecycleState,
    SessionEnded,
    SessionStarted,
)
from .validate import validate_deployment_report, validate_deployment_report_file

__all__ = [
    "ArtifactKind",
    "ArtifactPublished",
    "ContentIntrospector",
    "DeploymentRecord",
    "DeploymentReport",
    "FileSink",
    "IntrospectionError",
    "LifecycleError",
    "LifecycleState",
    "LogSink",
    "ReportAccumulator",
    "ReportError",
    "ReportLifecycle",
    "ReportSerializer",
    "ReportWriteError",
    "ReporterConfig",
    "SessionEnded",
    "SessionStarted",
    "resolve_reporter_config",
    "validate_deployment_report",
    "validate_deployment_report_file",
]
