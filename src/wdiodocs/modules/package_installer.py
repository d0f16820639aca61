"""Shallow npm package installation.

Philosophy:
- Single responsibility: put one package version into node_modules
- No dependency resolution (the archive is unpacked as-is)
- Zero-BS: every failed fetch or extraction raises

Public API (the "studs"):
    DependencyInstaller: Installs packages and the doc tool
    strip_components: Archive member renaming used during extraction
"""

import logging
import shutil
import tarfile
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

import requests

from wdiodocs.config_manager import SiteLayout
from wdiodocs.exceptions import ArchiveError, CommandFailure, FetchFailure
from wdiodocs.shell_executor import ExternalTool, ShellExecutor

logger = logging.getLogger(__name__)

LATEST = "latest"
MASTER = "master"


def strip_components(
    archive: tarfile.TarFile, target_dir: Path, count: int = 1
) -> Iterator[tarfile.TarInfo]:
    """Yield archive members renamed with their leading components removed.

    Members that become empty (the top-level directory itself) are skipped.

    Raises:
        ArchiveError: If a member would be written outside target_dir
    """
    root = target_dir.resolve()
    source = archive.name or "-"

    for member in archive.getmembers():
        parts = PurePosixPath(member.name).parts[count:]
        if not parts:
            continue

        destination = (root / PurePosixPath(*parts)).resolve()
        if destination != root and root not in destination.parents:
            raise ArchiveError(
                source, str(target_dir), f"member escapes target directory: {member.name}"
            )

        if member.islnk():
            link_parts = PurePosixPath(member.linkname).parts[count:]
            if not link_parts:
                raise ArchiveError(
                    source, str(target_dir), f"hard link to archive root: {member.name}"
                )
            member.linkname = str(PurePosixPath(*link_parts))

        member.name = str(PurePosixPath(*parts))
        yield member


class DependencyInstaller:
    """Install package versions into node_modules without npm's resolver."""

    CONNECT_TIMEOUT = 30

    def __init__(self, executor: ShellExecutor, layout: SiteLayout):
        self.layout = layout
        self.npm = ExternalTool(executor, layout.npm)

    def resolve_latest(self, package_name: str) -> str:
        """Return the newest published version of package_name.

        Raises:
            FetchFailure: If the registry cannot be queried
        """
        url = f"{self.layout.registry_url}/{package_name}/{LATEST}"
        try:
            response = requests.get(url, timeout=(self.CONNECT_TIMEOUT, None))
            response.raise_for_status()
            version = response.json()["version"]
        except requests.RequestException as e:
            raise FetchFailure(url, str(e)) from e
        except (KeyError, TypeError, ValueError) as e:
            raise FetchFailure(url, f"unexpected registry response: {e}") from e

        return str(version).strip()

    def archive_url(self, package_name: str, version: str) -> tuple[str, str]:
        """Return (archive file name, download url) for a version."""
        if version == MASTER:
            archive = "master.tar.gz"
            return archive, f"{self.layout.source_archive_url}/{archive}"

        archive = f"{package_name}-{version}.tgz"
        return archive, f"{self.layout.registry_url}/{package_name}/-/{archive}"

    def download(self, url: str, destination: Path) -> None:
        """Stream url into destination.

        Raises:
            FetchFailure: On connection errors or a non-2xx response
        """
        logger.debug(f"Downloading {url} -> {destination}")
        try:
            with requests.get(url, stream=True, timeout=(self.CONNECT_TIMEOUT, None)) as response:
                response.raise_for_status()
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=65536):
                        f.write(chunk)
        except requests.RequestException as e:
            raise FetchFailure(url, str(e)) from e

    def extract(self, archive_path: Path, target_dir: Path) -> None:
        """Unpack archive_path into target_dir, stripping one path component.

        Raises:
            ArchiveError: If the archive is unreadable or unsafe
        """
        try:
            with tarfile.open(archive_path, "r:gz") as archive:
                members = list(strip_components(archive, target_dir))
                archive.extractall(target_dir, members=members, filter="data")
        except (tarfile.TarError, OSError) as e:
            raise ArchiveError(str(archive_path), str(target_dir), str(e)) from e

    def install(self, package_name: str, version: str | None = None) -> None:
        """Install package_name at version into node_modules/<package_name>.

        Args:
            package_name: npm package name
            version: Exact version, "latest" (or empty) or "master"

        Raises:
            FetchFailure: If the registry or archive host fails
            ArchiveError: If extraction fails
        """
        if not version or version == LATEST:
            version = self.resolve_latest(package_name)

        target_dir = self.layout.node_modules / package_name
        target_dir.mkdir(parents=True, exist_ok=True)

        archive, url = self.archive_url(package_name, version)
        archive_path = self.layout.node_modules / archive

        self.download(url, archive_path)
        self.extract(archive_path, target_dir)
        archive_path.unlink()

        logger.debug(f"Installed {package_name}@{version} into {target_dir}")

    def remove(self, package_name: str) -> None:
        """Delete node_modules/<package_name>; a missing directory is an error.

        Raises:
            CommandFailure: Reported as the equivalent `rm -r`, exit code 1
        """
        target_dir = self.layout.node_modules / package_name
        logger.debug(f"Removing {target_dir}")
        try:
            shutil.rmtree(target_dir)
        except OSError as e:
            command = f"rm -r {target_dir}"
            raise CommandFailure(
                command, 1, message=f"command '{command}' failed with exit code 1: {e}"
            ) from e

    def install_doc_tool(self, version: str) -> None:
        """Install the doc tool through npm (with its dependencies)."""
        self.npm.run(["i", f"{self.layout.doc_tool_package}@{version}"])

    def uninstall_doc_tool(self) -> None:
        self.npm.run(["uninstall", self.layout.doc_tool_package])


__all__ = ["DependencyInstaller", "LATEST", "MASTER", "strip_components"]
