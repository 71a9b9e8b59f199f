import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'patternsmith'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from helpers.cache_utils import reset_patternsmith_caches


@pytest.fixture(autouse=True)
def _reset_global_caches() -> None:
    """Ensure all global caches are fresh for each test."""
    reset_patternsmith_caches()
    yield
    reset_patternsmith_caches()


@pytest.fixture
def isolated_project_env(tmp_path, monkeypatch):
    """
    Isolated project environment for tests.

    The working directory is a fresh project with an empty
    ``.patternsmith/config`` layer and no PATTERNSMITH_* overrides.
    """
    for key in list(os.environ):
        if key.startswith("PATTERNSMITH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".patternsmith" / "config").mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def write_project_config(isolated_project_env):
    """Write a YAML file into the isolated project's config layer."""
    import yaml

    def _write(name: str, data) -> Path:
        path = isolated_project_env / ".patternsmith" / "config" / name
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write
