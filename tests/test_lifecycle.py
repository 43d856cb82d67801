from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

import pytest

from deployment_reporter.reports.config import ReporterConfig
from deployment_reporter.reports.errors import (
    IntrospectionError,
    LifecycleError,
    ReportError,
    ReportWriteError,
)
from deployment_reporter.reports.lifecycle import ReportLifecycle
from deployment_reporter.reports.serializer import ReportSerializer
from deployment_reporter.reports.types import (
    ArtifactPublished,
    LifecycleState,
    SessionEnded,
    SessionStarted,
)


def _active(tmp_path: Path, name: str = "deployments.json") -> tuple[ReportLifecycle, Path]:
    out = tmp_path / name
    lifecycle = ReportLifecycle(ReporterConfig(output=out))
    lifecycle.on_session_start()
    return lifecycle, out


def test_no_events_no_output(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    lifecycle, out = _active(tmp_path)

    assert lifecycle.on_session_end() is None

    assert not out.exists()
    assert lifecycle.state is LifecycleState.FLUSHED

    log_lifecycle = ReportLifecycle(ReporterConfig(output=None))
    log_lifecycle.on_session_start()
    log_lifecycle.on_session_end()
    assert not [r for r in caplog.records if r.levelno >= logging.INFO]


def test_report_written_in_publish_order(tmp_path: Path, make_jar, make_pom) -> None:
    jar = make_jar("lib-1.0.jar", [("a/b.txt", b"x" * 10), ("a.txt", b"abc")])
    pom = make_pom("lib-1.0.pom", ["<project>", "  <version>1.0</version>", "</project>"])
    readme = tmp_path / "readme.txt"
    readme.write_text("docs\n", encoding="utf-8")
    lifecycle, out = _active(tmp_path)

    lifecycle.on_artifact_published("org.demo:lib:pom:1.0", pom)
    lifecycle.on_artifact_published("org.demo:lib:jar:1.0", jar)
    lifecycle.on_artifact_published("org.demo:lib:txt:readme:1.0", readme)
    report = lifecycle.on_session_end()

    assert report is not None and len(report) == 3
    assert json.loads(out.read_text(encoding="utf-8")) == {
        "deployments": [
            {
                "artifact": "org.demo:lib:pom:1.0",
                "content": {"content": "<project>\n  <version>1.0</version>\n</project>"},
            },
            {"artifact": "org.demo:lib:jar:1.0", "content": {"a.txt": "3", "a/b.txt": "10"}},
            {"artifact": "org.demo:lib:txt:readme:1.0", "content": None},
        ]
    }


def test_log_sink_when_no_output(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    readme = tmp_path / "readme.txt"
    readme.write_text("docs\n", encoding="utf-8")
    lifecycle = ReportLifecycle()
    lifecycle.on_session_start()
    lifecycle.on_artifact_published("g:a:txt:1.0", readme)

    lifecycle.on_session_end()

    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
    assert len(messages) == 1
    assert messages[0].startswith("Deployments:\n{")
    assert '"artifact": "g:a:txt:1.0"' in messages[0]


def test_concurrent_publish_then_end(tmp_path: Path, make_jar) -> None:
    jars = [make_jar(f"lib{i}.jar", [(f"C{i}.class", b"x" * (i + 1))]) for i in range(100)]
    lifecycle, out = _active(tmp_path)
    start = threading.Barrier(100)

    def publish(i: int) -> None:
        start.wait(timeout=10)
        lifecycle.on_artifact_published(f"g:lib{i}:jar:1.0", jars[i])

    threads = [threading.Thread(target=publish, args=(i,)) for i in range(100)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    lifecycle.on_session_end()

    deployments = json.loads(out.read_text(encoding="utf-8"))["deployments"]
    assert len(deployments) == 100
    assert len({d["artifact"] for d in deployments}) == 100
    for d in deployments:
        assert d["content"] is not None
        assert len(d["content"]) == 1


def test_bad_archive_fails_publish_and_flush(tmp_path: Path) -> None:
    bad = tmp_path / "broken.jar"
    bad.write_bytes(b"not a zip")
    lifecycle, out = _active(tmp_path)

    with pytest.raises(IntrospectionError):
        lifecycle.on_artifact_published("g:broken:jar:1.0", bad)
    with pytest.raises(ReportError, match="g:broken:jar:1.0"):
        lifecycle.on_session_end()

    assert not out.exists()
    assert lifecycle.state is LifecycleState.FLUSHED


def test_double_start_is_fatal(tmp_path: Path) -> None:
    lifecycle, _ = _active(tmp_path)

    with pytest.raises(LifecycleError):
        lifecycle.on_session_start()
    assert lifecycle.state is LifecycleState.ACTIVE


def test_end_without_start_is_fatal() -> None:
    lifecycle = ReportLifecycle()

    with pytest.raises(LifecycleError):
        lifecycle.on_session_end()
    assert lifecycle.state is LifecycleState.IDLE


def test_publish_before_start_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(LifecycleError):
        ReportLifecycle().on_artifact_published("g:a:txt:1.0", tmp_path / "a.txt")


def test_flushed_is_terminal(tmp_path: Path) -> None:
    lifecycle, _ = _active(tmp_path)
    lifecycle.on_session_end()

    with pytest.raises(LifecycleError):
        lifecycle.on_session_end()
    with pytest.raises(LifecycleError):
        lifecycle.on_artifact_published("g:a:txt:1.0", tmp_path / "a.txt")
    with pytest.raises(LifecycleError):
        lifecycle.on_session_start()


def test_resources_released_when_write_fails(tmp_path: Path) -> None:
    readme = tmp_path / "readme.txt"
    readme.write_text("docs\n", encoding="utf-8")
    serializer = ReportSerializer()
    lifecycle = ReportLifecycle(
        ReporterConfig(output=tmp_path / "no-such-dir" / "out.json"),
        serializer=serializer,
    )
    lifecycle.on_session_start()
    lifecycle.on_artifact_published("g:a:txt:1.0", readme)

    with pytest.raises(ReportWriteError):
        lifecycle.on_session_end()

    assert serializer.closed
    assert lifecycle.state is LifecycleState.FLUSHED


def test_serializer_released_on_empty_session() -> None:
    serializer = ReportSerializer()
    lifecycle = ReportLifecycle(serializer=serializer)
    lifecycle.on_session_start()

    lifecycle.on_session_end()

    assert serializer.closed


def test_dispatch_routes_events(tmp_path: Path, make_pom) -> None:
    pom = make_pom("a.pom", ["<project/>"])
    out = tmp_path / "out.json"
    lifecycle = ReportLifecycle(ReporterConfig(output=out))

    assert lifecycle.dispatch(SessionStarted()) is None
    record = lifecycle.dispatch(ArtifactPublished(artifact="g:a:pom:1", file=pom))
    assert record.content == {"content": "<project/>"}
    assert lifecycle.dispatch("ProjectDiscoveryStarted") is None
    report = lifecycle.dispatch(SessionEnded())

    assert report is not None and [d.artifact for d in report.deployments] == ["g:a:pom:1"]
    assert out.exists()
