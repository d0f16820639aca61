"""Static site assembly: stylesheets, hexo, minification, verification file."""

import logging
import os
from pathlib import Path

from wdiodocs.config_manager import SiteLayout
from wdiodocs.exceptions import BuildError
from wdiodocs.shell_executor import ExternalTool, ShellExecutor

logger = logging.getLogger(__name__)


class SiteAssembler:
    """Turn the markdown content tree into the minified public site."""

    def __init__(self, executor: ShellExecutor, layout: SiteLayout):
        self.layout = layout
        self.site_generator = ExternalTool(executor, layout.site_generator)
        self.stylesheet_compiler = ExternalTool(executor, layout.stylesheet_compiler)
        self.minifier = ExternalTool(executor, layout.minifier)

    @property
    def stylesheet(self) -> Path:
        return self.layout.public_dir / "css" / "screen.css"

    @property
    def script(self) -> Path:
        return self.layout.public_dir / "js" / "app.js"

    @property
    def verification_path(self) -> Path:
        return self.layout.public_dir / f"{self.layout.verification_file}.html"

    def compass(self) -> None:
        """Delete the compiled theme stylesheet and compile it again."""
        (self.layout.theme_css_dir / "screen.css").unlink(missing_ok=True)
        self.stylesheet_compiler.run(["compile"], cwd=self.layout.theme_css_dir)

    def generate(self) -> None:
        self.site_generator.run(["generate"])

    def _minify(self, source: Path) -> None:
        """Compress source into a temp file, then move it over the original."""
        temp = source.with_name(f"tmp{source.suffix}")
        self.minifier.run([source, "-o", temp])
        try:
            os.replace(temp, source)
        except OSError as e:
            raise BuildError(f"Failed to replace {source} with {temp}: {e}") from e

    def compress_css(self) -> None:
        self._minify(self.stylesheet)

    def compress_js(self) -> None:
        self._minify(self.script)

    def webmastertools(self) -> None:
        """Write the search engine site verification file."""
        name = f"{self.layout.verification_file}.html"
        try:
            self.verification_path.parent.mkdir(parents=True, exist_ok=True)
            self.verification_path.write_text(f"google-site-verification: {name}\n")
        except OSError as e:
            raise BuildError(f"Failed to write {self.verification_path}: {e}") from e
        logger.debug(f"Wrote {self.verification_path}")

    def assemble(self) -> None:
        """Run every sub-step in order; the first failure aborts."""
        self.compass()
        self.generate()
        self.compress_css()
        self.compress_js()
        self.webmastertools()


__all__ = ["SiteAssembler"]
