from __future__ import annotations

from importlib import metadata
from pathlib import Path

import pytest
from packaging.version import Version

import aiprimer_r3e
from aiprimer_r3e import _version as version_module

from tests.conftest import ROOT


def _missing_distribution(name: str) -> str:
    raise metadata.PackageNotFoundError(name)


def _changelog_version() -> str:
    for line in (ROOT / "CHANGELOG.md").read_text(encoding="utf-8").splitlines():
        if line.startswith("## v"):
            return line[len("## v"):].strip()
    raise AssertionError("CHANGELOG.md has no release heading")


def test_version_has_three_release_parts() -> None:
    assert len(Version(aiprimer_r3e.__version__).release) == 3


def test_checkout_version_comes_from_changelog(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PYTHON_SEMANTIC_RELEASE_VERSION", raising=False)
    monkeypatch.setattr(version_module.metadata, "version", _missing_distribution)

    assert version_module._load_version() == _changelog_version()


def test_release_variable_wins_over_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYTHON_SEMANTIC_RELEASE_VERSION", "2.3.4")
    monkeypatch.setattr(version_module.metadata, "version", lambda name: "0.0.1")

    assert version_module._load_version() == "2.3.4"


@pytest.mark.parametrize("raw", ["invalid-version", "1.2", "1.2.3.4"])
def test_malformed_versions_are_rejected(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("PYTHON_SEMANTIC_RELEASE_VERSION", raw)

    with pytest.raises(RuntimeError):
        version_module._load_version()


def test_sources_fallback_reads_first_release_heading(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    package_dir = tmp_path / "src" / "aiprimer_r3e"
    package_dir.mkdir(parents=True)
    (tmp_path / "CHANGELOG.md").write_text(
        "# Changelog\n\n## Unreleased\n\n## v3.2.1\n\n## v3.2.0\n", encoding="utf-8"
    )
    monkeypatch.setattr(version_module, "__file__", str(package_dir / "_version.py"))

    assert version_module._version_from_sources() == "3.2.1"


def test_sources_fallback_without_changelog(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    package_dir = tmp_path / "src" / "aiprimer_r3e"
    package_dir.mkdir(parents=True)
    monkeypatch.setattr(version_module, "__file__", str(package_dir / "_version.py"))

    with pytest.raises(RuntimeError, match="Unable to determine"):
        version_module._version_from_sources()
