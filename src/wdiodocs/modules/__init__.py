"""wdiodocs modules - Self-contained bricks following the brick philosophy

Each module is a self-contained component with clear contracts:
- Package Installer: Shallow archive installs into node_modules
- Doc Generator: Library docs and wddoc markdown
- Site Assembler: compass, hexo, yuicompressor, verification file
- Workspace Cleaner: Remove generated output before a full build
"""

from . import doc_generator, package_installer, site_assembler, workspace_cleaner

__all__ = [
    "doc_generator",
    "package_installer",
    "site_assembler",
    "workspace_cleaner",
]
