from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Mapping

from .determinism import sorted_mapping
from .errors import IntrospectionError
from .types import ArtifactKind

LOGGER = logging.getLogger(__name__)

DESCRIPTOR_CONTENT_KEY = "content"


def archive_summary(path: Path) -> dict[str, str]:
    """List an archive's entries as `{entry name: uncompressed size}`.

    Keys are ascending so that summaries of the same archive diff cleanly
    across builds, whatever order the entries were written in. Directory
    entries are kept as stored (size 0).
    """

    try:
        with zipfile.ZipFile(path) as zf:
            infos = zf.infolist()
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        # ValueError covers malformed headers, including undecodable UTF-8 names.
        raise IntrospectionError(f"Cannot read archive {path}: {e}") from e

    try:
        return sorted_mapping((info.filename, str(info.file_size)) for info in infos)
    except ValueError as e:
        raise IntrospectionError(f"Archive {path} has a {e}") from e


def descriptor_summary(path: Path) -> dict[str, str]:
    """Capture a descriptor file's full text, lines joined with `\\n`."""

    try:
        # Universal newlines: \r\n and \r both become \n.
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IntrospectionError(f"Cannot read descriptor {path}: {e}") from e

    if text.endswith("\n"):
        text = text[:-1]
    return {DESCRIPTOR_CONTENT_KEY: text}


class ContentIntrospector:
    """Produces the diffable content summary of a published file."""

    def kind(self, file: str | Path) -> ArtifactKind:
        return ArtifactKind.of(file)

    def summarize(self, file: str | Path) -> Mapping[str, str] | None:
        path = Path(file)
        kind = self.kind(path)
        LOGGER.debug("Summarizing %s as %s", path, kind.value)

        if kind is ArtifactKind.ARCHIVE:
            return archive_summary(path)
        if kind is ArtifactKind.DESCRIPTOR:
            return descriptor_summary(path)
        # Other kinds are not summarized (yet).
        return None
