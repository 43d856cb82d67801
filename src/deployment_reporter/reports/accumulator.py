from __future__ import annotations

import logging
import threading
from pathlib import Path

from .errors import LifecycleError, ReportError
from .introspect import ContentIntrospector
from .types import DeploymentRecord, DeploymentReport

LOGGER = logging.getLogger(__name__)


class ReportAccumulator:
    """Collects the deployment records of one session.

    `record` may be called from many threads at once. The record is inserted
    while holding the lock, so insertion order is well defined, and its
    content summary is computed after the lock is released so that file I/O
    of different artifacts runs in parallel.

    Every call is counted as in flight until its summary is assigned.
    `close` stops new records and `join` blocks until the in-flight count
    drops to zero, which is what makes a following `snapshot` complete.
    """

    def __init__(self, introspector: ContentIntrospector | None = None) -> None:
        self._introspector = introspector or ContentIntrospector()
        self._cond = threading.Condition(threading.Lock())
        self._records: list[DeploymentRecord] = []
        self._failed: list[str] = []
        self._in_flight = 0
        self._closed = False

    def record(self, artifact_id: str, file: str | Path) -> DeploymentRecord:
        deployment = DeploymentRecord(artifact=artifact_id)
        with self._cond:
            if self._closed:
                raise LifecycleError(f"Session already ended; cannot record {artifact_id}")
            self._records.append(deployment)
            self._in_flight += 1

        try:
            deployment.content = self._introspector.summarize(file)
            deployment.populated = True
        except BaseException:
            with self._cond:
                self._failed.append(artifact_id)
            raise
        finally:
            with self._cond:
                self._in_flight -= 1
                if self._in_flight == 0:
                    self._cond.notify_all()

        LOGGER.debug("Recorded %s (%s)", artifact_id, Path(file).name)
        return deployment

    def close(self) -> None:
        with self._cond:
            self._closed = True

    def join(self) -> None:
        with self._cond:
            self._cond.wait_for(lambda: self._in_flight == 0)

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._records)

    def snapshot(self) -> DeploymentReport:
        """Return the records collected so far.

        Raises ReportError if any record failed to be summarized or is still
        being summarized; call `close` and `join` first.
        """

        with self._cond:
            if self._failed:
                raise ReportError(
                    "Content introspection failed for: " + ", ".join(self._failed)
                )
            pending = [r.artifact for r in self._records if not r.populated]
            if pending:
                raise ReportError("Records still being summarized: " + ", ".join(pending))
            return DeploymentReport(deployments=tuple(self._records))
