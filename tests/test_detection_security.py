"""Tests for evidence sources: package.json reading and path safety."""

import json
import os
from pathlib import Path

import pytest

from setupwiz.detect.manifest import (
    DependencySection,
    DetectionEvidenceError,
    ProjectEvidence,
    combined_dependencies,
)
from setupwiz.detect.utils import is_safe_path, project_file


def write_package_json(project: Path, data: object) -> None:
    (project / "package.json").write_text(json.dumps(data))


class TestProjectEvidenceDependencies:
    """Tests for ProjectEvidence.get_dependencies()."""

    def test_reads_both_sections(self, tmp_path: Path) -> None:
        write_package_json(
            tmp_path,
            {
                "dependencies": {"react": "^18.2.0"},
                "devDependencies": {"typescript": "~5.4.0"},
            },
        )
        evidence = ProjectEvidence(tmp_path)

        assert evidence.get_dependencies(DependencySection.PRODUCTION) == {
            "react": "^18.2.0"
        }
        assert evidence.get_dependencies(DependencySection.DEVELOPMENT) == {
            "typescript": "~5.4.0"
        }

    def test_missing_manifest_yields_empty_sections(self, tmp_path: Path) -> None:
        evidence = ProjectEvidence(tmp_path)

        assert evidence.get_dependencies(DependencySection.PRODUCTION) == {}
        assert evidence.get_dependencies(DependencySection.DEVELOPMENT) == {}

    def test_missing_section_is_empty(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, {"name": "app"})

        assert ProjectEvidence(tmp_path).get_dependencies(
            DependencySection.DEVELOPMENT
        ) == {}

    def test_malformed_json_raises(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text("{not json")

        with pytest.raises(DetectionEvidenceError, match="Failed to parse"):
            ProjectEvidence(tmp_path).get_dependencies(DependencySection.PRODUCTION)

    def test_non_object_manifest_raises(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, ["react"])

        with pytest.raises(DetectionEvidenceError, match="JSON object"):
            ProjectEvidence(tmp_path).get_dependencies(DependencySection.PRODUCTION)

    def test_non_object_section_raises(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, {"dependencies": ["react"]})

        with pytest.raises(DetectionEvidenceError, match="not an object"):
            ProjectEvidence(tmp_path).get_dependencies(DependencySection.PRODUCTION)

    def test_manifest_read_once(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, {"dependencies": {"react": "18"}})
        evidence = ProjectEvidence(tmp_path)
        evidence.get_dependencies(DependencySection.PRODUCTION)

        write_package_json(tmp_path, {"dependencies": {"vue": "3"}})

        assert evidence.get_dependencies(DependencySection.PRODUCTION) == {
            "react": "18"
        }

    def test_manifest_symlinked_outside_root_is_refused(
        self, tmp_path: Path
    ) -> None:
        outside = tmp_path / "outside"
        outside.mkdir()
        write_package_json(outside, {"dependencies": {"react": "18"}})
        project = tmp_path / "project"
        project.mkdir()
        os.symlink(outside / "package.json", project / "package.json")

        with pytest.raises(DetectionEvidenceError, match="unsafe"):
            ProjectEvidence(project).get_dependencies(DependencySection.PRODUCTION)

    def test_manifest_symlinked_inside_root_is_read(self, tmp_path: Path) -> None:
        (tmp_path / "packages").mkdir()
        write_package_json(tmp_path / "packages", {"dependencies": {"react": "18"}})
        os.symlink(tmp_path / "packages" / "package.json", tmp_path / "package.json")

        assert ProjectEvidence(tmp_path).get_dependencies(
            DependencySection.PRODUCTION
        ) == {"react": "18"}


class TestCombinedDependencies:
    """Tests for combined_dependencies()."""

    def test_dev_entries_override_prod(self) -> None:
        sections = {
            DependencySection.PRODUCTION: {"eslint": "8.0.0", "react": "18"},
            DependencySection.DEVELOPMENT: {"eslint": "9.1.0"},
        }

        merged = combined_dependencies(lambda section: sections[section])

        assert merged == {"eslint": "9.1.0", "react": "18"}

    def test_failing_section_treated_as_empty(self) -> None:
        def dev_unreadable(section: DependencySection) -> dict[str, str]:
            if section is DependencySection.DEVELOPMENT:
                raise DetectionEvidenceError("devDependencies is not an object")
            return {"react": "18"}

        assert combined_dependencies(dev_unreadable) == {"react": "18"}


class TestProjectEvidenceFiles:
    """Tests for ProjectEvidence.file_exists()."""

    def test_existing_file(self, tmp_path: Path) -> None:
        (tmp_path / "tsconfig.json").write_text("{}")

        assert ProjectEvidence(tmp_path).file_exists("tsconfig.json") is True

    def test_nested_file(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "App.tsx").write_text("")

        assert ProjectEvidence(tmp_path).file_exists("src/App.tsx") is True

    def test_missing_file(self, tmp_path: Path) -> None:
        assert ProjectEvidence(tmp_path).file_exists("angular.json") is False

    def test_parent_traversal_rejected(self, tmp_path: Path) -> None:
        project = tmp_path / "project"
        project.mkdir()
        (tmp_path / "secret.json").write_text("{}")

        assert ProjectEvidence(project).file_exists("../secret.json") is False

    def test_symlinked_indicator_inside_root_exists(self, tmp_path: Path) -> None:
        (tmp_path / "real.json").write_text("{}")
        os.symlink(tmp_path / "real.json", tmp_path / "angular.json")

        assert ProjectEvidence(tmp_path).file_exists("angular.json") is True

    def test_symlinked_indicator_outside_root_ignored(self, tmp_path: Path) -> None:
        project = tmp_path / "project"
        project.mkdir()
        (tmp_path / "real.json").write_text("{}")
        os.symlink(tmp_path / "real.json", project / "angular.json")

        assert ProjectEvidence(project).file_exists("angular.json") is False


class TestPathHelpers:
    """Tests for is_safe_path() and project_file()."""

    def test_regular_file_is_safe(self, tmp_path: Path) -> None:
        target = tmp_path / "package.json"
        target.write_text("{}")

        assert is_safe_path(target, tmp_path) is True

    def test_file_outside_root_is_unsafe(self, tmp_path: Path) -> None:
        project = tmp_path / "project"
        project.mkdir()
        outside = tmp_path / "other.json"
        outside.write_text("{}")

        assert is_safe_path(outside, project) is False

    def test_symlink_within_root_is_safe(self, tmp_path: Path) -> None:
        (tmp_path / "tsconfig.base.json").write_text("{}")
        link = tmp_path / "tsconfig.json"
        os.symlink(tmp_path / "tsconfig.base.json", link)

        assert is_safe_path(link, tmp_path) is True

    def test_absolute_indicator_rejected(self, tmp_path: Path) -> None:
        assert project_file(tmp_path, "/etc/passwd") is None

    def test_relative_indicator_resolved(self, tmp_path: Path) -> None:
        assert project_file(tmp_path, "src/App.jsx") == tmp_path / "src" / "App.jsx"
