# src/scratchpad/markup/render.py

"""
Markdown-ish preview renderer.

No parser, no AST: an ordered chain of regex stages, each a pure str -> str
function. Order is load-bearing:
- code is rendered first and its content is entity-encoded, so no later stage
  can match inside it (newlines included, which also disarms the line rules);
- bold runs before italic, so "**x**" never becomes nested emphasis;
- images run before links ("![a](b)" is a link with a leading "!").

This is not an HTML sanitizer. The output is only shown by the paired UI.
"""

from __future__ import annotations

import re
from collections.abc import Callable

Stage = Callable[[str], str]

# Characters that would let code content re-trigger later stages or open tags.
_CODE_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ("*", "&#42;"),
    ("_", "&#95;"),
    ("`", "&#96;"),
    ("[", "&#91;"),
    ("]", "&#93;"),
    ("\n", "&#10;"),
)

_BLOCK_TAGS = "h[1-6]|ul|ol|pre|blockquote"

_FENCE_RE = re.compile(r"```([\s\S]*?)```")
_FENCE_INFO_RE = re.compile(r"[\w#+.-]+")
_HEADING_RE = re.compile(r"^(#{1,3}) (.+)$", re.MULTILINE)
_BOLD_STAR_RE = re.compile(r"\*\*(.+?)\*\*")
_BOLD_UNDERSCORE_RE = re.compile(r"(?<!\w)__(.+?)__(?!\w)")
_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
_ITALIC_STAR_RE = re.compile(r"(?<![*\w])\*(?=\S)([^*\n<>]+?)(?<=\S)\*")
_ITALIC_UNDERSCORE_RE = re.compile(r"(?<!\w)_(?=\S)([^_\n<>]+?)(?<=\S)_(?!\w)")
_IMAGE_RE = re.compile(r"!\[([^\]\n]*)\]\(([^)\s]+)\)")
_LINK_RE = re.compile(r"\[([^\]\n]+)\]\(([^)\s]+)\)")
_BLOCKQUOTE_RE = re.compile(r"^> (.+)$", re.MULTILINE)
_HR_RE = re.compile(r"^---$", re.MULTILINE)
_UL_ITEM_RE = re.compile(r"^[*-] (.+)$", re.MULTILINE)
_OL_ITEM_RE = re.compile(r"^\d+\. (.+)$", re.MULTILINE)
_LI_RUN_RE = re.compile(r"(?:^<li>[^\n]*</li>(?:\n|$))+", re.MULTILINE)
_NL_BEFORE_BLOCK_RE = re.compile(rf"\n+(<(?:{_BLOCK_TAGS})>|<hr>)")
_NL_AFTER_BLOCK_RE = re.compile(rf"(</(?:{_BLOCK_TAGS})>|<hr>)\n+")
_PARAGRAPH_BREAK_RE = re.compile(r"\n{2,}")
_P_BEFORE_BLOCK_RE = re.compile(rf"<p>(<(?:{_BLOCK_TAGS})>|<hr>)")
_P_AFTER_BLOCK_RE = re.compile(rf"(</(?:{_BLOCK_TAGS})>|<hr>)</p>")


def escape_code(text: str) -> str:
    for raw, entity in _CODE_ESCAPES:
        text = text.replace(raw, entity)
    return text


def _attr(value: str) -> str:
    return value.replace("&", "&amp;").replace('"', "&quot;").replace("<", "&lt;").replace(">", "&gt;")


# ---- stages (in pipeline order) ----

def render_code_blocks(text: str) -> str:
    def repl(m: re.Match[str]) -> str:
        code = m.group(1)
        # Opening fence info string ("```py") is not code.
        first, sep, rest = code.partition("\n")
        if sep and _FENCE_INFO_RE.fullmatch(first):
            code = rest
        elif code.startswith("\n"):
            code = code[1:]
        if code.endswith("\n"):
            code = code[:-1]
        return f"<pre><code>{escape_code(code)}</code></pre>"

    return _FENCE_RE.sub(repl, text)


def render_headings(text: str) -> str:
    def repl(m: re.Match[str]) -> str:
        level = len(m.group(1))
        return f"<h{level}>{m.group(2)}</h{level}>"

    return _HEADING_RE.sub(repl, text)


def render_bold(text: str) -> str:
    # Leave inline code spans alone; they are rendered by the next stage.
    parts = _INLINE_CODE_RE.split(text)
    out: list[str] = []
    for i, part in enumerate(parts):
        if i % 2:
            out.append(f"`{part}`")
            continue
        part = _BOLD_STAR_RE.sub(r"<strong>\1</strong>", part)
        part = _BOLD_UNDERSCORE_RE.sub(r"<strong>\1</strong>", part)
        out.append(part)
    return "".join(out)


def render_inline_code(text: str) -> str:
    return _INLINE_CODE_RE.sub(lambda m: f"<code>{escape_code(m.group(1))}</code>", text)


def render_italic(text: str) -> str:
    text = _ITALIC_STAR_RE.sub(r"<em>\1</em>", text)
    return _ITALIC_UNDERSCORE_RE.sub(r"<em>\1</em>", text)


def render_links(text: str) -> str:
    text = _IMAGE_RE.sub(lambda m: f'<img src="{_attr(m.group(2))}" alt="{_attr(m.group(1))}" />', text)
    return _LINK_RE.sub(lambda m: f'<a href="{_attr(m.group(2))}">{m.group(1)}</a>', text)


def render_blockquotes(text: str) -> str:
    return _BLOCKQUOTE_RE.sub(r"<blockquote>\1</blockquote>", text)


def render_rules(text: str) -> str:
    return _HR_RE.sub("<hr>", text)


def render_lists(text: str) -> str:
    text = _UL_ITEM_RE.sub(r"<li>\1</li>", text)
    text = _OL_ITEM_RE.sub(r"<li>\1</li>", text)

    def wrap(m: re.Match[str]) -> str:
        run = m.group(0)
        tail = "\n" if run.endswith("\n") else ""
        return "<ul>" + run.replace("\n", "") + "</ul>" + tail

    return _LI_RUN_RE.sub(wrap, text)


def render_breaks(text: str) -> str:
    # Newlines next to a block element close/open the surrounding paragraph.
    text = _NL_BEFORE_BLOCK_RE.sub(r"</p><p>\1", text)
    text = _NL_AFTER_BLOCK_RE.sub(r"\1</p><p>", text)
    text = _PARAGRAPH_BREAK_RE.sub("</p><p>", text)
    return text.replace("\n", "<br>")


def wrap_paragraphs(text: str) -> str:
    html = f"<p>{text}</p>"
    html = _P_BEFORE_BLOCK_RE.sub(r"\1", html)
    html = _P_AFTER_BLOCK_RE.sub(r"\1", html)
    return html.replace("<p></p>", "")


PIPELINE: tuple[Stage, ...] = (
    render_code_blocks,
    render_headings,
    render_bold,
    render_inline_code,
    render_italic,
    render_links,
    render_blockquotes,
    render_rules,
    render_lists,
    render_breaks,
    wrap_paragraphs,
)


def render_markdown(text: str) -> str:
    """Render note text to preview markup. Pure: same input, same output."""
    if not text:
        return ""
    html = text.replace("\r\n", "\n")
    for stage in PIPELINE:
        html = stage(html)
    return html
