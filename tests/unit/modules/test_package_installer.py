"""Unit tests for package_installer module."""

import io
import tarfile
from unittest.mock import patch

import pytest
import requests

from wdiodocs.exceptions import ArchiveError, CommandFailure, FetchFailure
from wdiodocs.modules.package_installer import DependencyInstaller, strip_components


@pytest.fixture
def installer(executor, layout):
    return DependencyInstaller(executor, layout)


class TestStripComponents:
    """Tests for archive member renaming."""

    def _archive(self, names):
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
            for name in names:
                info = tarfile.TarInfo(name)
                archive.addfile(info, io.BytesIO(b""))
        buffer.seek(0)
        return tarfile.open(fileobj=buffer, mode="r:gz")

    def test_strips_top_directory(self, tmp_path):
        """Test one leading component is removed and the root is skipped."""
        with self._archive(["package", "package/a.js", "package/lib/b.js"]) as archive:
            names = [member.name for member in strip_components(archive, tmp_path)]
        assert names == ["a.js", "lib/b.js"]

    def test_rejects_escaping_member(self, tmp_path):
        """Test members pointing outside the target are refused."""
        with self._archive(["package/../../evil.sh"]) as archive:
            with pytest.raises(ArchiveError, match="escapes target directory") as exc_info:
                list(strip_components(archive, tmp_path))

        assert exc_info.value.command.endswith(f"--strip-components 1 -C {tmp_path}")
        assert exc_info.value.exit_code == 1


class TestResolveLatest:
    """Tests for registry version lookup."""

    def test_returns_trimmed_version(self, installer, response_factory):
        """Test the registry's version field is returned without whitespace."""
        response = response_factory(json_data={"version": " 4.2.1\n"})
        with patch("requests.get", return_value=response) as mock_get:
            assert installer.resolve_latest("webdriverio") == "4.2.1"

        assert mock_get.call_args[0][0] == "https://registry.npmjs.org/webdriverio/latest"

    def test_http_error_raises_fetch_failure(self, installer, response_factory, http_error):
        """Test a registry error surfaces as a command failure."""
        with patch("requests.get", return_value=response_factory(error=http_error)):
            with pytest.raises(FetchFailure) as exc_info:
                installer.resolve_latest("webdriverio")

        assert isinstance(exc_info.value, CommandFailure)
        assert exc_info.value.command == "GET https://registry.npmjs.org/webdriverio/latest"
        assert exc_info.value.exit_code == 1

    def test_connection_error(self, installer):
        """Test a network failure surfaces as FetchFailure."""
        with patch("requests.get", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(FetchFailure, match="refused"):
                installer.resolve_latest("wddoc")

    def test_malformed_response(self, installer, response_factory):
        """Test a response without a version field is reported."""
        with patch("requests.get", return_value=response_factory(json_data={})):
            with pytest.raises(FetchFailure, match="unexpected registry response"):
                installer.resolve_latest("webdriverio")


class TestArchiveUrl:
    """Tests for archive location resolution."""

    def test_registry_tarball(self, installer):
        archive, url = installer.archive_url("webdriverio", "4.0.0")
        assert archive == "webdriverio-4.0.0.tgz"
        assert url == "https://registry.npmjs.org/webdriverio/-/webdriverio-4.0.0.tgz"

    def test_master_snapshot(self, installer):
        archive, url = installer.archive_url("webdriverio", "master")
        assert archive == "master.tar.gz"
        assert url == "https://github.com/webdriverio/webdriverio/archive/master.tar.gz"


class TestInstall:
    """Tests for DependencyInstaller.install."""

    def test_install_pinned_version(self, installer, layout, package_archive, response_factory):
        """Test a pinned install unpacks the archive and removes it."""
        response = response_factory(content=package_archive)
        with patch("requests.get", return_value=response) as mock_get:
            installer.install("webdriverio", "4.0.0")

        mock_get.assert_called_once()
        assert mock_get.call_args[0][0].endswith("/webdriverio/-/webdriverio-4.0.0.tgz")

        target = layout.library_dir
        assert (target / "package.json").read_text() == '{"name": "webdriverio"}'
        assert (target / "docs" / "index.md").exists()
        assert (target / "lib" / "commands" / "click.js").exists()
        assert not (layout.node_modules / "webdriverio-4.0.0.tgz").exists()

    def test_install_latest_resolves_first(self, installer, package_archive, response_factory):
        """Test 'latest' looks up the version before downloading."""
        responses = [
            response_factory(json_data={"version": "5.1.0"}),
            response_factory(content=package_archive),
        ]
        with patch("requests.get", side_effect=responses) as mock_get:
            installer.install("webdriverio", "latest")

        urls = [call[0][0] for call in mock_get.call_args_list]
        assert urls == [
            "https://registry.npmjs.org/webdriverio/latest",
            "https://registry.npmjs.org/webdriverio/-/webdriverio-5.1.0.tgz",
        ]

    def test_install_empty_version_means_latest(self, installer, package_archive, response_factory):
        """Test an empty version behaves like 'latest'."""
        responses = [
            response_factory(json_data={"version": "5.1.0"}),
            response_factory(content=package_archive),
        ]
        with patch("requests.get", side_effect=responses) as mock_get:
            installer.install("webdriverio", "")

        assert mock_get.call_count == 2

    def test_install_master(self, installer, layout, make_archive, response_factory):
        """Test 'master' downloads the repository snapshot."""
        snapshot = make_archive({"README.md": "snapshot"}, top="webdriverio-master")
        with patch("requests.get", return_value=response_factory(content=snapshot)) as mock_get:
            installer.install("webdriverio", "master")

        assert mock_get.call_args[0][0].endswith("/archive/master.tar.gz")
        assert (layout.library_dir / "README.md").read_text() == "snapshot"
        assert not (layout.node_modules / "master.tar.gz").exists()

    def test_install_overwrites_previous_files(
        self, installer, layout, make_archive, response_factory
    ):
        """Test re-installing replaces files from a prior install."""
        layout.library_dir.mkdir(parents=True)
        (layout.library_dir / "README.md").write_text("old")
        archive = make_archive({"README.md": "new"})

        with patch("requests.get", return_value=response_factory(content=archive)):
            installer.install("webdriverio", "4.0.0")

        assert (layout.library_dir / "README.md").read_text() == "new"

    def test_download_failure_propagates(self, installer, response_factory, http_error):
        """Test a failed download aborts the install."""
        with patch("requests.get", return_value=response_factory(error=http_error)):
            with pytest.raises(FetchFailure, match="404"):
                installer.install("webdriverio", "9.9.9")

    def test_corrupt_archive(self, installer, layout, response_factory):
        """Test an unreadable archive fails like the tar command it replaces."""
        with patch("requests.get", return_value=response_factory(content=b"not a tarball")):
            with pytest.raises(ArchiveError) as exc_info:
                installer.install("webdriverio", "4.0.0")

        error = exc_info.value
        assert isinstance(error, CommandFailure)
        assert error.exit_code == 1
        assert error.command == (
            f"tar -xzf {layout.node_modules / 'webdriverio-4.0.0.tgz'} "
            f"--strip-components 1 -C {layout.library_dir}"
        )
        assert str(error).startswith(f"command '{error.command}' failed with exit code 1: ")

    def test_extract_rejects_absolute_symlink(self, installer, layout, tmp_path):
        """Test extraction refuses links pointing outside the target directory."""
        archive_path = tmp_path / "linked.tgz"
        with tarfile.open(archive_path, "w:gz") as archive:
            info = tarfile.TarInfo("package/passwd")
            info.type = tarfile.SYMTYPE
            info.linkname = "/etc/passwd"
            archive.addfile(info)

        layout.library_dir.mkdir(parents=True)
        with pytest.raises(ArchiveError) as exc_info:
            installer.extract(archive_path, layout.library_dir)

        assert exc_info.value.exit_code == 1
        assert not (layout.library_dir / "passwd").is_symlink()


class TestRemove:
    """Tests for DependencyInstaller.remove."""

    def test_remove(self, installer, layout):
        (layout.library_dir / "lib").mkdir(parents=True)
        installer.remove("webdriverio")
        assert not layout.library_dir.exists()

    def test_remove_missing_fails(self, installer, layout):
        """Test removing a package that is not installed fails like rm -r."""
        with pytest.raises(CommandFailure) as exc_info:
            installer.remove("webdriverio")

        assert exc_info.value.command == f"rm -r {layout.library_dir}"
        assert exc_info.value.exit_code == 1


class TestDocTool:
    """Tests for doc tool installation through npm."""

    def test_install_doc_tool(self, installer, executor):
        installer.install_doc_tool("1.0.0")
        assert executor.commands == ["npm i wddoc@1.0.0"]

    def test_uninstall_doc_tool(self, installer, executor):
        installer.uninstall_doc_tool()
        assert executor.commands == ["npm uninstall wddoc"]
