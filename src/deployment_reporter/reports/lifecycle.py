from __future__ import annotations

import logging
import threading
from pathlib import Path

from .accumulator import ReportAccumulator
from .config import ReporterConfig
from .errors import LifecycleError
from .introspect import ContentIntrospector
from .serializer import ReportSerializer
from .types import (
    ArtifactPublished,
    DeploymentRecord,
    DeploymentReport,
    LifecycleState,
    SessionEnded,
    SessionStarted,
)

LOGGER = logging.getLogger(__name__)


class ReportLifecycle:
    """Session boundaries of the deployment report.

    IDLE -> ACTIVE on session start, ACTIVE -> FLUSHED on session end.
    FLUSHED is terminal: an instance serves exactly one build session.

    Publish calls may come from any number of threads while ACTIVE. Session
    start and end are expected once each, before and after all publishes.
    """

    def __init__(
        self,
        config: ReporterConfig | None = None,
        *,
        serializer: ReportSerializer | None = None,
        introspector: ContentIntrospector | None = None,
    ) -> None:
        self._config = config or ReporterConfig()
        self._serializer_override = serializer
        self._introspector = introspector
        self._lock = threading.Lock()
        self._state = LifecycleState.IDLE
        self._accumulator: ReportAccumulator | None = None
        self._serializer: ReportSerializer | None = None

    @property
    def state(self) -> LifecycleState:
        with self._lock:
            return self._state

    @property
    def config(self) -> ReporterConfig:
        return self._config

    def on_session_start(self) -> None:
        with self._lock:
            if self._state is not LifecycleState.IDLE:
                raise LifecycleError(f"Session start received in state {self._state.value}")
            self._accumulator = ReportAccumulator(self._introspector)
            self._serializer = self._serializer_override or ReportSerializer()
            self._state = LifecycleState.ACTIVE
        LOGGER.debug("Deployment report session started (output: %s)", self._config.output or "log")

    def on_artifact_published(self, artifact_id: str, file: str | Path) -> DeploymentRecord:
        with self._lock:
            if self._state is not LifecycleState.ACTIVE or self._accumulator is None:
                raise LifecycleError(
                    f"Artifact {artifact_id} published in state {self._state.value}"
                )
            accumulator = self._accumulator
        # The accumulator does its own locking; holding ours here would
        # serialize every publish on file I/O.
        return accumulator.record(artifact_id, file)

    def on_session_end(self) -> DeploymentReport | None:
        """Flush the report and release the session.

        Returns the flushed report, or None when no artifact was published
        and nothing was written.
        """

        with self._lock:
            if self._state is not LifecycleState.ACTIVE:
                raise LifecycleError(f"Session end received in state {self._state.value}")
            accumulator = self._accumulator
            serializer = self._serializer
            self._state = LifecycleState.FLUSHED
        if accumulator is None or serializer is None:
            raise LifecycleError("Active session has no report state")

        try:
            accumulator.close()
            accumulator.join()
            if len(accumulator) == 0:
                LOGGER.debug("No deployments recorded; skipping report")
                return None
            report = accumulator.snapshot()
            serializer.flush(report, self._config.sink)
            return report
        finally:
            serializer.close()
            with self._lock:
                self._accumulator = None
                self._serializer = None
            LOGGER.debug("Deployment report session ended")

    def dispatch(self, event: object) -> DeploymentRecord | DeploymentReport | None:
        """Route a host event to the matching operation.

        Objects outside the handled event set are ignored.
        """

        if isinstance(event, SessionStarted):
            self.on_session_start()
            return None
        if isinstance(event, SessionEnded):
            return self.on_session_end()
        if isinstance(event, ArtifactPublished):
            return self.on_artifact_published(event.artifact, event.file)
        LOGGER.debug("event: %r", event)
        return None
