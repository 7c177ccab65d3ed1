"""
Shared test fixtures and configuration.
"""

import json
import textwrap
from pathlib import Path

import pytest

from stylebuild.core.services.css.base import ChainState, StylesheetSource
from stylebuild.core.services.css.nodes import parse_stylesheet

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d49484452000000010000000108060000001f15c489"
    "0000000d49444154789c63000100000500010d0a2db40000000049454e44ae426082"
)

DOCS_TEMPLATE = textwrap.dedent("""\
    <!doctype html>
    <title>xp.css {{ version }}</title>
    <h2 id="section-{{ get_new_id() }}">Button</h2>
    <a href="#section-{{ get_current_id() }}">link</a>
    {% call example() %}
      <div class="window">[[<span class="live"></span>]]hello</div>
    {% endcall %}
""")


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def make_state(tmp_path: Path, css: str, locate=None) -> ChainState:
    """ChainState with an already-parsed sheet, for testing single stages."""
    source = StylesheetSource(
        text=css,
        origin=tmp_path / "index.scss",
        destination=tmp_path / "dist" / "out.css",
    )
    state = ChainState(source=source, text=css)
    state.sheet = parse_stylesheet(css, locate)
    return state


@pytest.fixture
def style_project(tmp_path: Path) -> Path:
    """A small project with both themes, the scoped toolkit, and docs."""
    root = tmp_path / "project"

    write(root / "package.json", json.dumps({
        "name": "xp.css",
        "version": "0.2.3",
        "homepage": "https://example.org/xp.css",
    }))

    write(root / "themes" / "98" / "index.scss", textwrap.dedent("""\
        @import "partials/button";

        :root {
          --face: silver;
        }

        .window {
          background: var(--face) url(img/bg.png);

          .title {
            color: white;
          }
        }
    """))
    write(root / "themes" / "98" / "partials" / "_button.scss", textwrap.dedent("""\
        button {
          padding: calc(4px + 2px);
        }
    """))
    (root / "themes" / "98" / "img").mkdir(parents=True)
    (root / "themes" / "98" / "img" / "bg.png").write_bytes(PNG_BYTES)

    write(root / "themes" / "XP" / "index.scss", textwrap.dedent("""\
        :root {
          --fg: black;
        }

        body {
          color: var(--fg);
        }
    """))

    write(root / "gui" / "index.scss", textwrap.dedent("""\
        .surface {
          color: red;
        }

        .button {
          margin: 0.5px;
        }

        body {
          margin: 0;
        }
    """))

    write(root / "docs" / "index.html.j2", DOCS_TEMPLATE)
    (root / "docs" / "extra.png").write_bytes(PNG_BYTES)
    write(root / "docs" / "docs.css", "body { margin: 0; }\n")

    return root
