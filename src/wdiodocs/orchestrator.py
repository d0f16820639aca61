"""Build orchestrator: wires the components and exposes the command table."""

import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from wdiodocs.build_matrix import BuildMatrixRunner, expand_matrix
from wdiodocs.command_router import Command, CommandTable, parse_bool
from wdiodocs.config_manager import BuildOptions
from wdiodocs.modules.doc_generator import DocGenerator
from wdiodocs.modules.package_installer import DependencyInstaller
from wdiodocs.modules.site_assembler import SiteAssembler
from wdiodocs.modules.workspace_cleaner import WorkspaceCleaner
from wdiodocs.shell_executor import ShellExecutor

logger = logging.getLogger(__name__)


class BuildOrchestrator:
    """All documentation build operations for one set of options.

    Example:
        >>> orchestrator = BuildOrchestrator(BuildOptions())
        >>> "compress-css" in orchestrator.commands
        True
    """

    def __init__(
        self,
        options: BuildOptions,
        executor: ShellExecutor | None = None,
        console: Console | None = None,
    ):
        self.options = options
        self.executor = executor or ShellExecutor()
        self.console = console or Console()

        layout = options.layout
        self.installer = DependencyInstaller(self.executor, layout)
        self.generator = DocGenerator(self.executor, layout)
        self.assembler = SiteAssembler(self.executor, layout)
        self.cleaner = WorkspaceCleaner(self.installer, layout)
        self.runner = BuildMatrixRunner(
            options, self.installer, self.generator, self.assembler, self.cleaner
        )
        self.commands = self._command_table()

    def build(self, version_token: str, clean: str | None = None) -> None:
        self.runner.build(version_token, None if clean is None else parse_bool(clean))

    def show_matrix(self, version_token: str) -> None:
        """Print the rows a build of version_token would run."""
        table = Table(title=f"Build matrix for '{version_token}'")
        table.add_column("API version")
        table.add_column(self.options.layout.library_package)
        table.add_column(self.options.layout.doc_tool_package)

        for row in expand_matrix(self.options.builds, version_token):
            table.add_row(row.api_version, row.library_version, row.doc_tool_version)

        self.console.print(table)

    def _command_table(self) -> CommandTable:
        generator = self.generator
        assembler = self.assembler

        def target(path: str | None = None) -> Path | None:
            return Path(path) if path else None

        return CommandTable(
            [
                Command("clean", self.cleaner.clean, "Remove generated output and packages"),
                Command(
                    "build",
                    self.build,
                    "Build the docs of a version token and assemble the site",
                    usage="<versionToken> [clean]",
                    min_args=1,
                    max_args=2,
                ),
                Command(
                    "getDocs",
                    lambda path=None: generator.get_docs(target(path)),
                    "Copy the library docs into the content tree",
                    usage="[targetDir]",
                    max_args=1,
                ),
                Command(
                    "generateActionCommands",
                    lambda path=None: generator.generate_action_commands(target(path)),
                    "Generate markdown for action commands",
                    usage="[targetDir]",
                    max_args=1,
                ),
                Command(
                    "generateProtocolCommands",
                    lambda path=None: generator.generate_protocol_commands(target(path)),
                    "Generate markdown for protocol commands",
                    usage="[targetDir]",
                    max_args=1,
                ),
                Command(
                    "generateMarkdown",
                    generator.generate_markdown,
                    "Copy docs and generate all markdown for one API version",
                    usage="[version]",
                    max_args=1,
                ),
                Command("compass", assembler.compass, "Recompile the theme stylesheet"),
                Command("generate", assembler.generate, "Generate the site with hexo"),
                Command("compressCSS", assembler.compress_css, "Minify the site stylesheet"),
                Command("compressJS", assembler.compress_js, "Minify the site script"),
                Command(
                    "webmastertools", assembler.webmastertools, "Write the verification file"
                ),
                Command(
                    "pkgInstall",
                    self.installer.install,
                    "Install a package version without its dependencies",
                    usage="<package> [version]",
                    min_args=1,
                    max_args=2,
                ),
                Command(
                    "matrix",
                    self.show_matrix,
                    "Show the build matrix of a version token",
                    usage="<versionToken>",
                    min_args=1,
                    max_args=1,
                ),
            ]
        )


__all__ = ["BuildOrchestrator"]
