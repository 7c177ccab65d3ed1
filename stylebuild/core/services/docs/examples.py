"""
Example extraction — live markup plus a highlighted "Show code" panel.

Snippets mark live-only markup with double brackets::

    <div>[[<span class="live"></span>]]hello</div>

The rendered example keeps the bracketed content (markers removed); the
displayed source drops it entirely. Markers are matched non-greedily
and may span lines.
"""

from __future__ import annotations

import re
import textwrap

from markupsafe import Markup
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import HtmlLexer

_MARKERS_RE = re.compile(r"\[\[(.*?)\]\]", re.DOTALL)

_EXAMPLE_TEMPLATE = """<div class="example">
  {inline}
  <details>
    <summary>Show code</summary>
    <pre><code>{highlighted}</code></pre>
  </details>
</div>"""


def dedent_snippet(code: str) -> str:
    """Strip common indentation and surrounding blank lines."""
    return textwrap.dedent(code).strip("\n").rstrip()


def inline_view(code: str) -> str:
    """Snippet as rendered on the page: markers dropped, content kept."""
    return _MARKERS_RE.sub(r"\1", dedent_snippet(code))


def display_view(code: str) -> str:
    """Snippet as shown in the code panel: markers and their content dropped."""
    return _MARKERS_RE.sub("", dedent_snippet(code))


def highlight_markup(code: str) -> str:
    """Highlight HTML source as span-annotated, escaped markup."""
    # Pygments ends the formatted output with a newline even without ensurenl
    return highlight(code, HtmlLexer(ensurenl=False), HtmlFormatter(nowrap=True)).rstrip("\n")


def render_example(code: str) -> Markup:
    """Full example block: live markup followed by its highlighted source."""
    return Markup(_EXAMPLE_TEMPLATE.format(
        inline=inline_view(code),
        highlighted=highlight_markup(display_view(code)),
    ))


def example(code: str | None = None, caller=None) -> Markup:
    """Template helper: ``example(code)`` or ``{% call example() %}…{% endcall %}``."""
    if code is None:
        if caller is None:
            raise TypeError("example() needs a snippet or a call block")
        code = str(caller())
    return render_example(code)
