"""Markdown generation from the installed library.

Copies the library's hand-written docs into the content tree and runs the
doc tool over the protocol and action command sources.

Public API (the "studs"):
    DocGenerator: get_docs, generate_protocol_commands,
        generate_action_commands, generate_markdown
"""

import logging
import shutil
from pathlib import Path

from wdiodocs.config_manager import SiteLayout
from wdiodocs.exceptions import BuildError
from wdiodocs.shell_executor import ExternalTool, ShellExecutor

logger = logging.getLogger(__name__)

FRONT_MATTER = "layout: single\ntitle: {title}\n---\n\n"


class DocGenerator:
    """Write the markdown sources of one API version."""

    def __init__(self, executor: ShellExecutor, layout: SiteLayout):
        self.layout = layout
        self.doc_tool = ExternalTool(executor, str(layout.doc_tool_binary))

    def root_folder(self, api_version_suffix: str = "") -> Path:
        if api_version_suffix:
            return self.layout.content_root / api_version_suffix
        return self.layout.content_root

    def api_folder(self, api_version_suffix: str = "") -> Path:
        return self.root_folder(api_version_suffix) / self.layout.api_folder

    def get_docs(self, target_dir: Path | None = None) -> None:
        """Copy the library docs and its contribution guide into target_dir.

        Raises:
            BuildError: If the installed library lacks its docs
        """
        target_dir = Path(target_dir) if target_dir else self.layout.content_root
        library_dir = self.layout.library_dir

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copytree(library_dir / "docs", target_dir, dirs_exist_ok=True)

            contributing = (library_dir / "CONTRIBUTING.md").read_text(encoding="utf-8")
            header = FRONT_MATTER.format(title=self.layout.contribute_title)
            (target_dir / "contribute.md").write_text(header + contributing, encoding="utf-8")
        except OSError as e:
            raise BuildError(f"Failed to copy docs from {library_dir}: {e}") from e

        logger.debug(f"Copied docs from {library_dir} into {target_dir}")

    def command_sources(self, tree: str) -> str:
        """Return the source pattern for lib/<tree>; the doc tool expands it."""
        return str(self.layout.library_dir / "lib" / tree / "**" / "*.js")

    def _run_doc_tool(self, tree: str, target_dir: Path) -> None:
        self.doc_tool.run(
            [
                "-i",
                self.command_sources(tree),
                "-o",
                target_dir,
                "-t",
                self.layout.doc_tool_template,
            ]
        )

    def generate_protocol_commands(self, target_dir: Path | None = None) -> None:
        """Generate markdown for the protocol commands."""
        self._run_doc_tool("protocol", Path(target_dir) if target_dir else self.api_folder())

    def generate_action_commands(self, target_dir: Path | None = None) -> None:
        """Generate markdown for the action commands."""
        self._run_doc_tool("commands", Path(target_dir) if target_dir else self.api_folder())

    def generate_markdown(self, api_version_suffix: str = "") -> None:
        """Write docs and command markdown for one API version.

        Args:
            api_version_suffix: Subfolder below the content root, empty for latest
        """
        root_folder = self.root_folder(api_version_suffix)
        api_folder = self.api_folder(api_version_suffix)

        self.get_docs(root_folder)
        api_folder.mkdir(parents=True, exist_ok=True)
        self.generate_protocol_commands(api_folder)
        self.generate_action_commands(api_folder)


__all__ = ["DocGenerator", "FRONT_MATTER"]
