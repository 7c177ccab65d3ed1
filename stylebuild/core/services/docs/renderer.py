"""
Documentation renderer — Jinja2 page plus a flat copy of the docs assets.

The template sees:
  get_new_id()      — next id from a per-render counter (1, 2, …)
  get_current_id()  — the last id handed out, without incrementing
  example(code)     — live example + highlighted source (also usable
                      as ``{% call example() %}…{% endcall %}``)
  plus any extra context (version, homepage).

``build_docs`` copies the assets and renders the page on two worker
threads and waits for both before returning.
"""

from __future__ import annotations

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from pygments.formatters import HtmlFormatter

from .examples import example
from .ids import IdCounter

logger = logging.getLogger(__name__)


class DocsAssetError(Exception):
    """Raised when the documentation asset directory cannot be listed."""


@dataclass
class DocsResult:
    """Files written by a docs build."""

    index: Path
    assets: list[Path] = field(default_factory=list)
    highlight_css: Path | None = None


def create_environment(template_dir: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "htm", "xml", "j2"]),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def render_docs(template_path: Path, context: dict | None = None) -> str:
    """Render the page template with the example and id helpers."""
    counter = IdCounter()
    env = create_environment(template_path.parent)
    template = env.get_template(template_path.name)
    return template.render(
        get_new_id=counter.next_id,
        get_current_id=counter.current_id,
        example=example,
        **(context or {}),
    )


def write_docs(template_path: Path, output_path: Path, context: dict | None = None) -> Path:
    html = render_docs(template_path, context)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
    logger.info("Rendered %s -> %s", template_path, output_path)
    return output_path


def copy_doc_assets(
    source_dir: Path,
    dist_dir: Path,
    exclude: list[Path] | None = None,
) -> list[Path]:
    """Copy every regular file of *source_dir* (not recursive) into *dist_dir*.

    Raises:
        DocsAssetError: If *source_dir* is not a directory.
    """
    if not source_dir.is_dir():
        raise DocsAssetError(f"error globbing docs directory: {source_dir}")

    excluded = {p.resolve() for p in exclude or []}
    dist_dir.mkdir(parents=True, exist_ok=True)

    copied: list[Path] = []
    for src in sorted(source_dir.iterdir()):
        if not src.is_file() or src.resolve() in excluded:
            continue
        dest = dist_dir / src.name
        shutil.copyfile(src, dest)
        copied.append(dest)

    logger.info("Copied %d docs assets to %s", len(copied), dist_dir)
    return copied


def write_highlight_css(path: Path, style: str = "default") -> Path:
    """Write the Pygments stylesheet matching the highlighted examples."""
    css = HtmlFormatter(style=style).get_style_defs(".example pre")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(css + "\n", encoding="utf-8")
    return path


def build_docs(
    template_path: Path,
    source_dir: Path,
    dist_dir: Path,
    output_name: str = "index.html",
    context: dict | None = None,
    highlight_css: str = "",
    highlight_style: str = "default",
) -> DocsResult:
    """Copy docs assets and render the page, joining both.

    Raises:
        DocsAssetError: If the docs directory is missing.
        jinja2.TemplateError: If the template fails to render.
    """
    dist_dir.mkdir(parents=True, exist_ok=True)

    with ThreadPoolExecutor(max_workers=2) as pool:
        copy_future = pool.submit(copy_doc_assets, source_dir, dist_dir, [template_path])
        render_future = pool.submit(write_docs, template_path, dist_dir / output_name, context)
        wait([copy_future, render_future])

    assets = copy_future.result()
    index = render_future.result()

    result = DocsResult(index=index, assets=assets)
    if highlight_css:
        result.highlight_css = write_highlight_css(dist_dir / highlight_css, highlight_style)
    return result
