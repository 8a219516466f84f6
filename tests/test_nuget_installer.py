"""End-to-end tests for the install pipeline with a fake resolver."""

import json
import logging
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from common.safe_mode import SafeMode
from nuget.installer import InstallState, NugetInstaller
from nuget.models import PackageRequest


def _make_project(base: Path) -> Path:
    (base / "Packages").mkdir(parents=True)
    (base / "Packages" / "manifest.json").write_text("{}", encoding="utf-8")
    return base


def _install(identifier, version, start, **kwargs):
    return NugetInstaller(**kwargs).install_in_unity_project([PackageRequest(identifier, version)], start)


def _cache(tmp_path: Path, files: dict) -> Path:
    cache = tmp_path / "nuget-cache"
    for rel, content in files.items():
        path = cache / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return cache


def _fake_restore(assets=None, returncode=0, seen=None):
    """Stand-in for subprocess.run that writes the assets file into the workspace."""

    def run(cmd, **kwargs):
        workspace = Path(kwargs["cwd"])
        if seen is not None:
            seen.append(workspace)
        if assets is not None:
            (workspace / "obj").mkdir()
            (workspace / "obj" / "project.assets.json").write_text(json.dumps(assets), encoding="utf-8")
        return subprocess.CompletedProcess(cmd, returncode, stdout="restore output", stderr="restore errors")

    return run


def _assets(cache: Path, libraries: dict) -> dict:
    return {
        "version": 3,
        "libraries": libraries,
        "project": {"restore": {"packagesPath": str(cache)}},
    }


class TestInstallInUnityProject:
    """Test full installs into a Unity project directory."""

    def test_only_netstandard_artifacts_are_copied(self, tmp_path):
        project = _make_project(tmp_path / "Game")
        cache = _cache(tmp_path, {
            "foo/1.0.0/lib/netstandard2.0/Foo.dll": "netstandard",
            "foo/1.0.0/lib/net472/Foo.dll": "net472",
        })
        assets = _assets(cache, {
            "Foo/1.0.0": {"path": "foo/1.0.0", "files": ["lib/netstandard2.0/Foo.dll", "lib/net472/Foo.dll"]},
        })
        seen = []

        with patch("nuget.restore.subprocess.run", side_effect=_fake_restore(assets, seen=seen)):
            outcome = _install("newtonsoft.json", "13.0.3", start=project)

        dest = project / "Assets" / "NugetPackages"
        assert outcome.state is InstallState.DONE
        assert outcome.succeeded
        assert outcome.destination == dest
        assert [p.name for p in dest.iterdir()] == ["Foo.dll"]
        assert (dest / "Foo.dll").read_text(encoding="utf-8") == "netstandard"
        assert outcome.history == [
            InstallState.LOCATING_DESTINATION,
            InstallState.WORKSPACE_ACQUIRED,
            InstallState.DESCRIPTOR_WRITTEN,
            InstallState.RESTORED,
            InstallState.MANIFEST_VALIDATED,
            InstallState.ARTIFACTS_COPIED,
            InstallState.DONE,
        ]
        # The workspace held the descriptor during restore and is gone now
        assert len(seen) == 1
        assert not seen[0].exists()

    def test_descriptor_names_requested_package(self, tmp_path):
        project = _make_project(tmp_path / "Game")
        captured = {}

        def run(cmd, **kwargs):
            captured["xml"] = (Path(kwargs["cwd"]) / "proj.csproj").read_text(encoding="utf-8")
            return _fake_restore(_assets(tmp_path, {}))(cmd, **kwargs)

        with patch("nuget.restore.subprocess.run", side_effect=run):
            outcome = _install("newtonsoft.json", "13.0.3", start=project)

        assert outcome.succeeded
        assert 'Include="newtonsoft.json"' in captured["xml"]
        assert 'Version="13.0.3"' in captured["xml"]

    def test_installs_into_package_folder(self, tmp_path):
        project = _make_project(tmp_path / "Game")
        pkg = project / "Packages" / "com.acme.tools"
        pkg.mkdir()
        (pkg / "package.json").write_text("{}", encoding="utf-8")
        cache = _cache(tmp_path, {"bar/2.0.0/lib/netstandard2.0/Bar.xml": "docs"})
        assets = _assets(cache, {"Bar/2.0.0": {"path": "bar/2.0.0", "files": ["lib/netstandard2.0/Bar.xml"]}})

        with patch("nuget.restore.subprocess.run", side_effect=_fake_restore(assets)):
            outcome = _install("bar", "2.0.0", start=pkg)

        assert outcome.succeeded
        assert (pkg / "NugetPackages" / "Bar.xml").exists()
        assert not (project / "Assets").exists()

    def test_multiple_packages_in_one_descriptor(self, tmp_path):
        dest = tmp_path / "dest"
        captured = {}

        def run(cmd, **kwargs):
            captured["xml"] = (Path(kwargs["cwd"]) / "proj.csproj").read_text(encoding="utf-8")
            return _fake_restore(_assets(tmp_path, {}))(cmd, **kwargs)

        packages = [PackageRequest("a.one", "1.0.0"), PackageRequest("b.two", "2.0.0")]
        with patch("nuget.restore.subprocess.run", side_effect=run):
            outcome = NugetInstaller().install(packages, dest)

        assert outcome.succeeded
        assert captured["xml"].index("a.one") < captured["xml"].index("b.two")


class TestInstallFailures:
    """Test that failures stop the pipeline and leave nothing behind."""

    def test_restore_failure_leaves_destination_untouched(self, tmp_path):
        project = _make_project(tmp_path / "Game")
        dest = project / "Assets" / "NugetPackages"
        dest.mkdir(parents=True)
        (dest / "Existing.dll").write_text("keep", encoding="utf-8")
        seen = []

        with patch("nuget.restore.subprocess.run", side_effect=_fake_restore(returncode=1, seen=seen)):
            outcome = _install("missing.package", "1.0.0", start=project)

        assert outcome.state is InstallState.FAILED
        assert outcome.failed_stage == "restore"
        assert "restore output" in outcome.reason
        assert "restore errors" in outcome.reason
        assert (dest / "Existing.dll").read_text(encoding="utf-8") == "keep"
        assert not seen[0].exists()

    def test_manifest_without_libraries(self, tmp_path):
        project = _make_project(tmp_path / "Game")
        assets = {"project": {"restore": {"packagesPath": str(tmp_path)}}}

        with patch("nuget.restore.subprocess.run", side_effect=_fake_restore(assets)):
            outcome = _install("foo", "1.0.0", start=project)

        assert outcome.failed_stage == "manifest"
        assert "libraries not found" in outcome.reason
        assert not (project / "Assets" / "NugetPackages").exists()

    def test_missing_assets_file(self, tmp_path):
        project = _make_project(tmp_path / "Game")
        with patch("nuget.restore.subprocess.run", side_effect=_fake_restore()):
            outcome = _install("foo", "1.0.0", start=project)
        assert outcome.failed_stage == "manifest"

    def test_no_install_target(self, tmp_path):
        with patch("nuget.restore.subprocess.run") as mock_run:
            outcome = _install("foo", "1.0.0", start=tmp_path)
        assert outcome.state is InstallState.FAILED
        assert outcome.failed_stage == "locate"
        assert outcome.history == [InstallState.LOCATING_DESTINATION, InstallState.FAILED]
        mock_run.assert_not_called()

    def test_undecodable_manifest_is_a_manifest_failure(self, tmp_path):
        project = _make_project(tmp_path / "Game")

        def run(cmd, **kwargs):
            obj = Path(kwargs["cwd"]) / "obj"
            obj.mkdir()
            (obj / "project.assets.json").write_bytes(b'{"libraries": {"\xff\xfe": 1}}')
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        with patch("nuget.restore.subprocess.run", side_effect=run):
            outcome = _install("foo", "1.0.0", start=project)

        assert outcome.state is InstallState.FAILED
        assert outcome.failed_stage == "manifest"
        assert "Failed to decode" in outcome.reason

    @pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script as resolver")
    def test_undecodable_resolver_output_is_a_restore_failure(self, tmp_path):
        project = _make_project(tmp_path / "Game")
        resolver = tmp_path / "fake-dotnet"
        resolver.write_text("#!/bin/sh\nprintf '\\377\\376 bad bytes'\nexit 1\n", encoding="utf-8")
        resolver.chmod(0o755)

        outcome = _install("foo", "1.0.0", start=project, resolver=str(resolver))

        assert outcome.failed_stage == "restore"
        assert "bad bytes" in outcome.reason
        assert outcome.error.result.exit_code == 1

    def test_restore_diagnostics_are_logged_once(self, tmp_path, caplog):
        caplog.set_level(logging.INFO)
        project = _make_project(tmp_path / "Game")
        with patch("nuget.restore.subprocess.run", side_effect=_fake_restore(returncode=1)):
            _install("foo", "1.0.0", start=project)
        logged = [r for r in caplog.records if "restore errors" in r.getMessage()]
        assert len(logged) == 1
        assert logged[0].levelno == logging.ERROR


class TestSafeModeInstall:
    """Test the confirmation gate inside the pipeline."""

    def test_declining_first_prompt_aborts_without_side_effects(self, tmp_path, capsys):
        project = _make_project(tmp_path / "Game")
        gate = SafeMode(enabled=True, input_func=lambda _: "n")

        with patch("nuget.restore.subprocess.run") as mock_run:
            outcome = _install("foo", "1.0.0", confirm=gate, start=project)

        assert outcome.state is InstallState.ABORTED
        assert outcome.failed_stage is None
        mock_run.assert_not_called()
        assert "Creating temporary directory" in capsys.readouterr().out

    def test_accepting_all_prompts_completes(self, tmp_path):
        project = _make_project(tmp_path / "Game")
        gate = SafeMode(enabled=True, input_func=lambda _: "Y")

        with patch("nuget.restore.subprocess.run", side_effect=_fake_restore(_assets(tmp_path, {}))):
            outcome = _install("foo", "1.0.0", confirm=gate, start=project)

        assert outcome.succeeded
