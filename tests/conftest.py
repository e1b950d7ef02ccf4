import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep developer tokens and overrides out of the tests.
    for name in list(os.environ):
        if name.startswith("ENVBAKER_") or name in ("GITHUB_TOKEN", "GH_TOKEN"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    src = tmp_path / "x"
    (src / "b").mkdir(parents=True)
    (src / "a.txt").write_text("hello")
    (src / "b" / "c.txt").write_text("world")
    return src


def _snapshot(root: Path) -> dict[str, bytes | None]:
    out: dict[str, bytes | None] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        out[rel] = None if path.is_dir() else path.read_bytes()
    return out


@pytest.fixture
def snapshot():
    """Map relative paths under a root to file bytes (None for directories)."""
    return _snapshot
