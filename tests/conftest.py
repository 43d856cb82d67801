from __future__ import annotations

import sys
import zipfile
from pathlib import Path
from typing import Iterable

import pytest

_SRC = (Path(__file__).resolve().parents[1] / "src").as_posix()
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)


def write_jar(path: Path, entries: Iterable[tuple[str, bytes]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries:
            zf.writestr(zipfile.ZipInfo(name), data)
    return path


@pytest.fixture
def make_jar(tmp_path: Path):
    def _make(name: str, entries: Iterable[tuple[str, bytes]]) -> Path:
        return write_jar(tmp_path / name, entries)

    return _make


@pytest.fixture
def make_pom(tmp_path: Path):
    def _make(name: str, lines: list[str]) -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _make
