"""Workspace cleanup before a full build.

Removes generated output, generated markdown and installed packages.
Missing targets are skipped; any other filesystem or npm failure raises.
"""

import logging
import os
import shutil
from pathlib import Path

from wdiodocs.config_manager import SiteLayout
from wdiodocs.exceptions import BuildError
from wdiodocs.modules.package_installer import DependencyInstaller

logger = logging.getLogger(__name__)


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink(missing_ok=True)


class WorkspaceCleaner:
    """The four clean sub-steps, runnable one by one."""

    def __init__(self, installer: DependencyInstaller, layout: SiteLayout):
        self.installer = installer
        self.layout = layout

    def remove_public(self) -> list[Path]:
        """Remove public/ and every sibling starting with its name."""
        public = self.layout.public_dir
        removed = sorted(public.parent.glob(f"{public.name}*"))
        try:
            for path in removed:
                _remove_path(path)
        except OSError as e:
            raise BuildError(f"Failed to remove generated output: {e}") from e
        return removed

    def remove_markdown(self) -> list[Path]:
        """Delete every *.md below the content root."""
        root = self.layout.content_root
        if not root.exists():
            return []

        removed = sorted(root.rglob("*.md"))
        try:
            for path in removed:
                if path.exists() or path.is_symlink():
                    _remove_path(path)
        except OSError as e:
            raise BuildError(f"Failed to remove markdown under {root}: {e}") from e
        return removed

    def prune_empty_dirs(self) -> list[Path]:
        """Delete empty directories bottom-up, the content root included."""
        root = self.layout.content_root
        if not root.is_dir():
            return []

        pruned = []
        try:
            for dirpath, _dirnames, _filenames in os.walk(root, topdown=False):
                path = Path(dirpath)
                if not any(path.iterdir()):
                    path.rmdir()
                    pruned.append(path)
        except OSError as e:
            raise BuildError(f"Failed to prune {root}: {e}") from e
        return pruned

    def uninstall_packages(self) -> None:
        """Uninstall the doc tool via npm and drop the shallow library install."""
        self.installer.uninstall_doc_tool()
        if self.layout.library_dir.exists():
            self.installer.remove(self.layout.library_package)

    def clean(self) -> None:
        self.remove_public()
        self.remove_markdown()
        self.prune_empty_dirs()
        self.uninstall_packages()
        logger.debug("Workspace cleaned")


__all__ = ["WorkspaceCleaner"]
