from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Union


ARCHIVE_SUFFIXES = (".jar", ".war", ".ear", ".zip")
DESCRIPTOR_SUFFIXES = (".pom",)


class ArtifactKind(str, Enum):
    """How the contents of a published file are summarized.

    Dispatch is on the file name suffix only (case-sensitive).
    """

    ARCHIVE = "archive"
    DESCRIPTOR = "descriptor"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, path: str | Path) -> ArtifactKind:
        name = Path(path).name
        if name.endswith(ARCHIVE_SUFFIXES):
            return cls.ARCHIVE
        if name.endswith(DESCRIPTOR_SUFFIXES):
            return cls.DESCRIPTOR
        return cls.UNKNOWN


class LifecycleState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FLUSHED = "flushed"


@dataclass
class DeploymentRecord:
    """One published artifact.

    `content` is assigned once, right after the record is inserted into the
    session's collection. Until then it is `None`, which is also the final
    value for artifacts of an unknown kind; `populated` tells the two apart.
    """

    artifact: str
    content: Mapping[str, str] | None = None
    populated: bool = field(default=False, compare=False, repr=False)

    def to_json(self) -> dict[str, object]:
        return {
            "artifact": self.artifact,
            "content": dict(self.content) if self.content is not None else None,
        }


@dataclass(frozen=True)
class DeploymentReport:
    """Immutable snapshot of a session's records, in insertion order."""

    deployments: tuple[DeploymentRecord, ...]

    def __len__(self) -> int:
        return len(self.deployments)

    def to_json(self) -> dict[str, object]:
        return {"deployments": [d.to_json() for d in self.deployments]}


@dataclass(frozen=True)
class SessionStarted:
    pass


@dataclass(frozen=True)
class SessionEnded:
    pass


@dataclass(frozen=True)
class ArtifactPublished:
    """An artifact was installed or deployed.

    `artifact` is an opaque display id (for example a Maven-style
    `group:name:type:version` coordinate); it is never parsed.
    """

    artifact: str
    file: Path


ReportEvent = Union[SessionStarted, SessionEnded, ArtifactPublished]
