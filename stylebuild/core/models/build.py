"""
Build model — what gets compiled, where it lands, and how it is labelled.

Loaded from stylebuild.yml (or derived from package.json when no
config file exists). Paths are relative to the project root.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel, Field


class PackageMeta(BaseModel):
    """Project metadata embedded in every banner comment."""

    name: str = ""
    version: str
    homepage: str = ""


class ScopeConfig(BaseModel):
    """Selector namespacing for a stylesheet that must not leak onto a host page.

    Selectors listed in ``exceptions`` get the prefix appended to
    themselves instead of being nested under it.
    """

    prefix: str
    exceptions: list[str] = Field(default_factory=lambda: ["body", ".surface"])


class StylesheetTarget(BaseModel):
    """One stylesheet source tree and its output file."""

    name: str
    entry: str
    output: str
    banner: str = ""                    # Label in the banner; defaults to the output file name
    scope: ScopeConfig | None = None

    @property
    def banner_name(self) -> str:
        if self.banner:
            return self.banner
        # "GUI.scoped.css" is still advertised as "GUI.css"
        stem = PurePosixPath(self.output).name.split(".")[0]
        return f"{stem}.css"


class AssetConfig(BaseModel):
    """How url() assets referenced from stylesheets are copied."""

    template: str = "[name].[ext]"


class DocsConfig(BaseModel):
    """Documentation page rendering."""

    template: str = "docs/index.html.j2"
    source_dir: str = "docs"
    output: str = "index.html"
    highlight_css: str = ""             # Optional Pygments stylesheet file name
    highlight_style: str = "default"


def _default_stylesheets() -> list[StylesheetTarget]:
    return [
        StylesheetTarget(name="98", entry="themes/98/index.scss", output="98.css"),
        StylesheetTarget(name="XP", entry="themes/XP/index.scss", output="XP.css"),
        StylesheetTarget(
            name="GUI",
            entry="gui/index.scss",
            output="GUI.scoped.css",
            scope=ScopeConfig(prefix=".winXP"),
        ),
    ]


class BuildConfig(BaseModel):
    """Root build configuration."""

    package: PackageMeta
    dist: str = "dist"
    assets: AssetConfig = Field(default_factory=AssetConfig)
    stylesheets: list[StylesheetTarget] = Field(default_factory=_default_stylesheets)
    docs: DocsConfig | None = Field(default_factory=DocsConfig)

    def banner_for(self, target: StylesheetTarget) -> str:
        """Banner comment prepended to a stylesheet's source text."""
        homepage = self.package.homepage
        suffix = f" - {homepage}" if homepage else ""
        return f"/*! {target.banner_name} v{self.package.version}{suffix} */\n"

    def get_stylesheet(self, name: str) -> StylesheetTarget | None:
        """Look up a stylesheet target by name."""
        for target in self.stylesheets:
            if target.name == name:
                return target
        return None
