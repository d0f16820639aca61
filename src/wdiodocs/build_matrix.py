"""Version matrix build loop.

A build expands a version token into matrix rows, optionally cleans the
workspace, builds the markdown of every row in order and assembles the site
once at the end.

    Idle -> Cleaning -> IteratingVersions -> Assembling -> Done
                 (any state) -> Failed

The installed doc tool version is carried from row to row as an explicit
accumulator, so a doc tool shared by consecutive rows is installed once.
"""

import logging
from collections.abc import Sequence
from enum import Enum

from wdiodocs.config_manager import BuildOptions, VersionSpec
from wdiodocs.modules.doc_generator import DocGenerator
from wdiodocs.modules.package_installer import LATEST, MASTER, DependencyInstaller
from wdiodocs.modules.site_assembler import SiteAssembler
from wdiodocs.modules.workspace_cleaner import WorkspaceCleaner

logger = logging.getLogger(__name__)

ALL = "all"


class BuildState(Enum):
    """Build state indicators."""

    IDLE = "idle"
    CLEANING = "cleaning"
    ITERATING_VERSIONS = "iterating_versions"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


def expand_matrix(builds: Sequence[VersionSpec], version_token: str) -> list[VersionSpec]:
    """Return the matrix rows to build for version_token.

    "all" selects every configured row, any other token the rows with that
    api version. A synthetic latest row is appended for "all" and whenever
    nothing matched.
    """
    if version_token == ALL:
        matrix = list(builds)
    else:
        matrix = [build for build in builds if build.api_version == version_token]

    if not matrix or version_token == ALL:
        matrix.append(
            VersionSpec(
                api_version=LATEST,
                library_version=LATEST if version_token == ALL else MASTER,
                doc_tool_version=LATEST,
            )
        )

    return matrix


class BuildMatrixRunner:
    """Run the full build for one set of options."""

    def __init__(
        self,
        options: BuildOptions,
        installer: DependencyInstaller,
        generator: DocGenerator,
        assembler: SiteAssembler,
        cleaner: WorkspaceCleaner,
    ):
        self.options = options
        self.installer = installer
        self.generator = generator
        self.assembler = assembler
        self.cleaner = cleaner
        self.state = BuildState.IDLE

    def build_row(self, row: VersionSpec, installed_doc_tool: str | None) -> str | None:
        """Build the markdown of one matrix row.

        Args:
            row: Matrix row to build
            installed_doc_tool: Doc tool version installed by a previous row

        Returns:
            Doc tool version installed after this row
        """
        layout = self.options.layout
        logger.debug(f"Building {row}")

        self.installer.install(layout.library_package, row.library_version)

        if installed_doc_tool != row.doc_tool_version:
            self.installer.install_doc_tool(row.doc_tool_version)
            installed_doc_tool = row.doc_tool_version

        if row.api_version == LATEST:
            self.generator.generate_markdown()
        else:
            self.generator.generate_markdown(row.api_version)

        self.installer.remove(layout.library_package)
        return installed_doc_tool

    def build(self, version_token: str, clean: bool | None = None) -> None:
        """Build every matrix row of version_token and assemble the site.

        Args:
            version_token: "all", an api version, or anything else for master
            clean: Override for the configured clean option
        """
        matrix = expand_matrix(self.options.builds, version_token)
        effective_clean = self.options.clean if clean is None else clean

        try:
            if effective_clean:
                self.state = BuildState.CLEANING
                self.cleaner.clean()

            self.state = BuildState.ITERATING_VERSIONS
            installed_doc_tool = None
            for row in matrix:
                installed_doc_tool = self.build_row(row, installed_doc_tool)

            self.state = BuildState.ASSEMBLING
            self.assembler.assemble()
        except BaseException:
            self.state = BuildState.FAILED
            raise

        self.state = BuildState.DONE
        logger.debug(f"Built {len(matrix)} matrix rows")


__all__ = ["ALL", "BuildMatrixRunner", "BuildState", "expand_matrix"]
