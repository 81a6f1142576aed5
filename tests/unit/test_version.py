"""Unit coverage for the project version helper."""

from __future__ import annotations

import re
from importlib import metadata
from pathlib import Path

import pytest

from naijatax.backend.version import get_project_version

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _declared_version() -> str:
    text = _PYPROJECT.read_text(encoding="utf-8")
    project_section = text.split("[project]", 1)[1].split("\n[", 1)[0]
    match = re.search(r'^version\s*=\s*"([^"]+)"', project_section, re.MULTILINE)
    assert match is not None, "pyproject.toml must declare [project].version"
    return match.group(1)


@pytest.fixture(autouse=True)
def _reset_version_cache():
    get_project_version.cache_clear()  # type: ignore[attr-defined]
    yield
    get_project_version.cache_clear()  # type: ignore[attr-defined]


def test_installed_metadata_takes_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(metadata, "version", lambda package: "9.9.9")

    assert get_project_version() == "9.9.9"


def test_falls_back_to_pyproject_when_not_installed(monkeypatch: pytest.MonkeyPatch) -> None:
    def raise_package_not_found(_: str) -> str:
        raise metadata.PackageNotFoundError

    monkeypatch.setattr(metadata, "version", raise_package_not_found)

    assert get_project_version() == _declared_version()
