"""Integration tests for CLI commands.

Install commands are intercepted at the subprocess boundary.
"""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from package_versions.cli import app


@pytest.fixture
def runner():
    """Create a CliRunner for in-process testing."""
    return CliRunner()


@pytest.fixture
def project(workspace, write_manifest, monkeypatch):
    """A single-package workspace with the CLI running inside it."""
    monkeypatch.chdir(workspace)
    return write_manifest(dependencies={"lodash": "^4.17.20"})


def bump(path, version):
    data = json.loads(path.read_text())
    data["dependencies"]["lodash"] = version
    path.write_text(json.dumps(data))


class TestCLI:

    def test_snapshot(self, runner, project):
        result = runner.invoke(app, ["snapshot"])
        assert result.exit_code == 0, result.output
        assert "snapshot updated" in result.output
        assert (project.parent / ".package-versions" / "state.json").exists()

    def test_changes_after_edit(self, runner, project):
        runner.invoke(app, ["snapshot"])
        bump(project, "^4.17.21")

        result = runner.invoke(app, ["changes", "package.json"])

        assert result.exit_code == 0, result.output
        assert "lodash" in result.output
        assert "^4.17.20 → ^4.17.21" in result.output

    def test_changes_without_drift(self, runner, project):
        runner.invoke(app, ["snapshot"])
        result = runner.invoke(app, ["changes", "package.json"])
        assert "No version changes since baseline." in result.output

    def test_changes_rejects_other_files(self, runner, project):
        result = runner.invoke(app, ["changes", "README.md"])
        assert result.exit_code == 1
        assert "not a package.json" in result.output

    def test_check_consumes_changes(self, runner, project):
        runner.invoke(app, ["snapshot"])
        bump(project, "^4.17.21")

        first = runner.invoke(app, ["check"])
        assert "lodash" in first.output
        assert "1 package changed" in first.output

        second = runner.invoke(app, ["check"])
        assert "No changes found." in second.output

    def test_reset(self, runner, project):
        result = runner.invoke(app, ["reset"])
        assert result.exit_code == 0
        assert "Baseline reset" in result.output

    def test_update_changed(self, runner, project):
        runner.invoke(app, ["snapshot"])
        bump(project, "^4.17.21")
        (project.parent / "yarn.lock").write_text("")

        with patch("package_versions.pm.subprocess.Popen") as popen:
            result = runner.invoke(app, ["update-changed"])

        assert result.exit_code == 0, result.output
        popen.assert_called_once_with("yarn install", shell=True, cwd=str(project.parent))
        assert "Started install in 1 changed package directory." in result.output

    def test_update_all(self, runner, project):
        runner.invoke(app, ["snapshot"])
        with patch("package_versions.pm.subprocess.Popen") as popen:
            result = runner.invoke(app, ["update-all"])
        assert result.exit_code == 0, result.output
        popen.assert_called_once_with("npm i", shell=True, cwd=str(project.parent))

    def test_options_prompt_dismiss(self, runner, project):
        runner.invoke(app, ["snapshot"])
        bump(project, "^4.17.21")

        with patch("package_versions.pm.subprocess.Popen") as popen:
            result = runner.invoke(app, ["options"], input="dismiss\n")

        assert result.exit_code == 0, result.output
        assert "Dismissed." in result.output
        popen.assert_not_called()

    def test_options_show_choice(self, runner, project):
        runner.invoke(app, ["snapshot"])
        bump(project, "^4.17.21")
        result = runner.invoke(app, ["options", "--choice", "show"])
        assert result.exit_code == 0, result.output
        assert "^4.17.20 → ^4.17.21" in result.output

    def test_options_all_without_drift(self, runner, project):
        runner.invoke(app, ["snapshot"])

        with patch("package_versions.pm.subprocess.Popen") as popen:
            result = runner.invoke(app, ["options", "--choice", "all"])

        assert result.exit_code == 0, result.output
        assert "No changes found." in result.output
        popen.assert_called_once_with("npm i", shell=True, cwd=str(project.parent))
        assert "Started install in 1 package directory." in result.output

    def test_options_prompt_shown_without_drift(self, runner, project):
        runner.invoke(app, ["snapshot"])

        with patch("package_versions.pm.subprocess.Popen") as popen:
            result = runner.invoke(app, ["options"], input="all\n")

        assert result.exit_code == 0, result.output
        assert "Update npm packages?" in result.output
        popen.assert_called_once()

    def test_watch_stops_when_event_source_fails(self, runner, project, monkeypatch):
        async def broken_run(self):
            raise OSError("watch backend gone")

        monkeypatch.setattr("package_versions.cli.ManifestWatcher.run", broken_run)

        result = runner.invoke(app, ["watch", "--interval", "0.01"])

        assert result.exit_code != 0
        assert isinstance(result.exception, OSError)

    def test_invalid_config(self, runner, project):
        config = project.parent / ".package-versions" / "config.yaml"
        config.parent.mkdir(exist_ok=True)
        config.write_text("packageManager: cargo\n")

        result = runner.invoke(app, ["snapshot"])

        assert result.exit_code == 1
        assert "packageManager" in result.output

    def test_config_command(self, runner, project):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "debounceMs: 250" in result.output

    def test_multi_root(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for name in ("a", "b"):
            (tmp_path / name).mkdir()
            (tmp_path / name / "package.json").write_text(json.dumps({"dependencies": {}}))

        result = runner.invoke(app, ["--root", "a", "--root", "b", "snapshot"])

        assert result.exit_code == 0, result.output
        assert "(2)" in result.output
