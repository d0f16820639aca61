"""wdiodocs - documentation site builder for webdriverio

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Strictly sequential, totally ordered build log
- Fail fast on the first broken step

wdiodocs installs pinned versions of webdriverio and wddoc, turns the
library's command comments into markdown and runs the hexo site build
followed by stylesheet and script minification.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
