from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .determinism import canonical_json_text
from .errors import LifecycleError, ReportWriteError
from .types import DeploymentReport
from .validate import validate_deployment_report

LOGGER = logging.getLogger(__name__)

LOG_LABEL = "Deployments:"


@dataclass(frozen=True)
class FileSink:
    path: Path


@dataclass(frozen=True)
class LogSink:
    logger: logging.Logger | None = None


ReportSink = Union[FileSink, LogSink]


def sink_for(output: str | Path | None) -> ReportSink:
    if output is None:
        return LogSink()
    return FileSink(Path(output))


class ReportSerializer:
    """Renders a report and writes it to a sink.

    One serializer serves one session; `close` releases it and later flushes
    are rejected.
    """

    def __init__(self, *, validate: bool = True) -> None:
        self._validate = validate
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def render(self, report: DeploymentReport) -> str:
        obj = report.to_json()
        if self._validate:
            validate_deployment_report(obj)
        return canonical_json_text(obj)

    def flush(self, report: DeploymentReport, sink: ReportSink) -> str:
        if self._closed:
            raise LifecycleError("Serializer already closed")

        document = self.render(report)
        if isinstance(sink, LogSink):
            (sink.logger or LOGGER).info("%s\n%s", LOG_LABEL, document)
        elif isinstance(sink, FileSink):
            _write_document(sink.path, document)
        else:
            raise TypeError(f"Unsupported report sink: {sink!r}")
        return document

    def close(self) -> None:
        self._closed = True


def _write_document(path: Path, document: str) -> None:
    try:
        with path.open("w", encoding="utf-8") as f:
            f.write(document)
    except OSError as e:
        raise ReportWriteError(f"Cannot write deployment report to {path}: {e}") from e
    LOGGER.debug("Wrote deployment report to %s", path)
