"""
Shared test fixtures and configuration for wdiodocs tests.

This module provides common fixtures used across all test types:
- A recording executor standing in for external binaries
- A temporary working directory the build writes into
- An installed-looking webdriverio package
- Package archives and fake HTTP responses
"""

import io
import tarfile
from unittest.mock import MagicMock

import pytest
import requests

from wdiodocs.config_manager import SiteLayout
from wdiodocs.exceptions import CommandFailure
from wdiodocs.shell_executor import ShellExecutor

# ============================================================================
# EXECUTOR FIXTURES
# ============================================================================


class RecordingExecutor(ShellExecutor):
    """Executor that records commands instead of spawning them.

    outputs maps a command prefix to the stdout it returns, failures maps a
    command prefix to the exit code it fails with.
    """

    def __init__(self, outputs=None, failures=None):
        super().__init__(echo=lambda *args, **kwargs: None)
        self.outputs = outputs or {}
        self.failures = failures or {}
        self.calls = []

    @property
    def commands(self):
        return [command for command, _silent, _cwd in self.calls]

    def execute(self, command, silent=False, cwd=None):
        self.calls.append((command, silent, cwd))
        for prefix, exit_code in self.failures.items():
            if command.startswith(prefix):
                raise CommandFailure(command, exit_code)
        for prefix, output in self.outputs.items():
            if command.startswith(prefix):
                return output
        return ""


@pytest.fixture
def executor():
    """Recording executor with no scripted outputs."""
    return RecordingExecutor()


@pytest.fixture
def make_executor():
    """Factory for recording executors with scripted outputs or failures."""
    return RecordingExecutor


# ============================================================================
# WORKSPACE FIXTURES
# ============================================================================


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Temporary working directory for the relative build layout."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def layout(workspace):
    """Default layout, resolved against the temporary workspace."""
    return SiteLayout()


@pytest.fixture
def installed_library(layout):
    """A shallow webdriverio install with docs and command sources."""
    library = layout.library_dir
    (library / "docs" / "guide").mkdir(parents=True)
    (library / "docs" / "index.md").write_text("# WebdriverIO\n")
    (library / "docs" / "guide" / "getstarted.md").write_text("# Getting started\n")
    (library / "CONTRIBUTING.md").write_text("# Contributing\n\nSend PRs.\n")
    (library / "lib" / "protocol").mkdir(parents=True)
    (library / "lib" / "protocol" / "url.js").write_text("// url\n")
    (library / "lib" / "commands" / "utility").mkdir(parents=True)
    (library / "lib" / "commands" / "click.js").write_text("// click\n")
    (library / "lib" / "commands" / "utility" / "waitFor.js").write_text("// waitFor\n")
    return library


# ============================================================================
# ARCHIVE AND HTTP FIXTURES
# ============================================================================


def make_tgz(files: dict[str, str], top: str = "package") -> bytes:
    """Build a gzipped tarball with every file below a single top directory."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        top_info = tarfile.TarInfo(top)
        top_info.type = tarfile.DIRTYPE
        top_info.mode = 0o755
        archive.addfile(top_info)
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(f"{top}/{name}")
            info.size = len(data)
            info.mode = 0o644
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def fake_response(content: bytes = b"", json_data=None, error: Exception | None = None):
    """MagicMock shaped like a requests.Response, usable as context manager."""
    response = MagicMock()
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    response.iter_content.return_value = [content[:10], content[10:]]
    response.json.return_value = json_data
    if error is not None:
        response.raise_for_status.side_effect = error
    return response


@pytest.fixture
def http_error():
    return requests.HTTPError("404 Client Error: Not Found")


@pytest.fixture
def package_archive() -> bytes:
    return make_tgz(
        {
            "package.json": '{"name": "webdriverio"}',
            "docs/index.md": "# WebdriverIO\n",
            "lib/commands/click.js": "// click\n",
        }
    )


@pytest.fixture
def make_archive():
    """Factory for gzipped package tarballs."""
    return make_tgz


@pytest.fixture
def response_factory():
    """Factory for fake requests responses."""
    return fake_response
