"""Shared fixtures for collectfiles tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture
def docs_tree(tmp_path: Path) -> Path:
    """Create the minimal mixed-extension tree.

    Structure::

        root/
        ├── sub/
        │   └── c.md
        ├── a.md
        └── b.txt
    """
    (tmp_path / "a.md").write_text("a")
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.md").write_text("c")
    return tmp_path


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a deeper test directory tree.

    Structure::

        root/
        ├── docs/
        │   └── guide.md
        ├── empty/
        ├── src/
        │   ├── api/
        │   │   ├── auth.py
        │   │   └── user.py
        │   └── models/
        │       ├── deep/
        │       │   └── base.py
        │       └── user.py
        ├── tests/
        │   └── test_user.py
        ├── .env
        └── README.md
    """
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("guide")
    (tmp_path / "empty").mkdir()
    (tmp_path / "src" / "api").mkdir(parents=True)
    (tmp_path / "src" / "api" / "auth.py").write_text("auth")
    (tmp_path / "src" / "api" / "user.py").write_text("user")
    (tmp_path / "src" / "models" / "deep").mkdir(parents=True)
    (tmp_path / "src" / "models" / "deep" / "base.py").write_text("base")
    (tmp_path / "src" / "models" / "user.py").write_text("user")
    (tmp_path / "tests").mkdir()
    (tmp_path / "tests" / "test_user.py").write_text("test")
    (tmp_path / ".env").write_text("SECRET=1")
    (tmp_path / "README.md").write_text("readme")
    return tmp_path


def reference_walk(root: Path) -> set[Path]:
    """Return every non-directory path below ``root``, following symlinked dirs."""
    found: set[Path] = set()
    for dirpath, _dirnames, filenames in os.walk(root, followlinks=True):
        for filename in filenames:
            found.add(Path(dirpath) / filename)
    return found


def relative_names(paths: list[Path], root: Path) -> set[str]:
    """Return ``paths`` as POSIX strings relative to ``root``."""
    return {path.relative_to(root).as_posix() for path in paths}
