from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from .serializer import ReportSink, sink_for


OUTPUT_PROPERTY = "deployment-reporter.output"
OUTPUT_ENV = "DEPLOYMENT_REPORTER_OUTPUT"


@dataclass(frozen=True)
class ReporterConfig:
    """Settings resolved once, before the session starts.

    `output` of None means the report goes to the log instead of a file.
    """

    output: Path | None = None

    @property
    def sink(self) -> ReportSink:
        return sink_for(self.output)


def _non_blank(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def resolve_output(
    explicit: str | os.PathLike[str] | None = None,
    properties: Iterable[Mapping[str, object]] = (),
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Resolve the report output file.

    Precedence:
    - explicit value
    - `deployment-reporter.output` in each property mapping, in order
      (system properties are expected before user properties)
    - `DEPLOYMENT_REPORTER_OUTPUT`
    - None (log sink)
    """

    if explicit is not None:
        value = _non_blank(os.fspath(explicit))
        if value:
            return Path(value)

    for props in properties:
        value = _non_blank(props.get(OUTPUT_PROPERTY))
        if value:
            return Path(value)

    env = os.environ if environ is None else environ
    value = _non_blank(env.get(OUTPUT_ENV))
    if value:
        return Path(value)

    return None


def resolve_reporter_config(
    explicit: str | os.PathLike[str] | None = None,
    properties: Iterable[Mapping[str, object]] = (),
    environ: Mapping[str, str] | None = None,
) -> ReporterConfig:
    return ReporterConfig(output=resolve_output(explicit, properties, environ))
