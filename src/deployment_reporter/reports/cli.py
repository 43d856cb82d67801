from __future__ import annotations

import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from jsonschema.exceptions import ValidationError

from .config import resolve_reporter_config
from .errors import ReportError
from .lifecycle import ReportLifecycle
from .types import ArtifactPublished, SessionEnded, SessionStarted

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactArg:
    artifact: str
    file: Path


def _parse_artifact(raw: str) -> ArtifactArg:
    artifact, sep, file = raw.partition("=")
    artifact = artifact.strip()
    file = file.strip()
    if not sep or not artifact or not file:
        raise argparse.ArgumentTypeError(f"expected ID=PATH, got {raw!r}")
    return ArtifactArg(artifact=artifact, file=Path(file))


def read_artifact_list(path: Path) -> list[ArtifactArg]:
    """Read `ID=PATH` lines; blank lines and '#' comments are skipped.

    Relative paths are resolved against the list file's directory.
    """

    out: list[ArtifactArg] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            arg = _parse_artifact(line)
        except argparse.ArgumentTypeError as e:
            raise ValueError(f"{path}: {e}") from e
        if not arg.file.is_absolute():
            arg = ArtifactArg(artifact=arg.artifact, file=path.parent / arg.file)
        out.append(arg)
    return out


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m deployment_reporter.reports.cli",
        description="Record published artifacts of one build session as a diffable deployment report.",
    )

    p.add_argument(
        "--artifact",
        action="append",
        default=[],
        type=_parse_artifact,
        metavar="ID=PATH",
        help="Published artifact id and its file (repeatable, kept in order).",
    )

    p.add_argument(
        "--artifact-list",
        action="append",
        default=[],
        metavar="FILE",
        help=(
            "File of ID=PATH lines (repeatable). Lines starting with '#' are ignored; "
            "relative paths are resolved against the file's directory."
        ),
    )

    p.add_argument(
        "--output",
        help=(
            "Report file to write (overwritten). Defaults to DEPLOYMENT_REPORTER_OUTPUT; "
            "if neither is set the report is logged."
        ),
    )

    p.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Number of artifacts introspected concurrently (default: 1).",
    )

    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    return p


def run_session(lifecycle: ReportLifecycle, artifacts: list[ArtifactArg], *, jobs: int = 1) -> int:
    """Drive one session and return the number of reported artifacts.

    The session is ended even when a publish fails, so that it is released;
    the publish failure is what propagates.
    """

    lifecycle.dispatch(SessionStarted())
    events = [ArtifactPublished(artifact=a.artifact, file=a.file) for a in artifacts]
    try:
        if jobs <= 1:
            for event in events:
                lifecycle.dispatch(event)
        else:
            with ThreadPoolExecutor(max_workers=jobs) as executor:
                futures = [executor.submit(lifecycle.dispatch, event) for event in events]
                for future in futures:
                    future.result()
    except BaseException:
        try:
            lifecycle.dispatch(SessionEnded())
        except ReportError as e:
            LOGGER.debug("Session end after failed publish: %s", e)
        raise

    report = lifecycle.dispatch(SessionEnded())
    return len(report) if report is not None else 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.jobs < 1:
        parser.error("--jobs must be >= 1")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        artifacts = list(args.artifact)
        for list_file in args.artifact_list:
            artifacts.extend(read_artifact_list(Path(list_file)))
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    config = resolve_reporter_config(args.output)
    lifecycle = ReportLifecycle(config)

    try:
        count = run_session(lifecycle, artifacts, jobs=args.jobs)
    except (ReportError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if count == 0:
        LOGGER.debug("No artifacts published; no report written")
    elif config.output is not None:
        LOGGER.info("Wrote %d deployment(s) to %s", count, config.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
