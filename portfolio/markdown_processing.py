from __future__ import annotations

import logging
import re

import markdown

from .config import (
    BLOCK_HTML,
    CODE_THEME,
    FENCE,
    JSX_CLOSE,
    JSX_OPEN,
    JSX_SELF_CLOSING,
    MDX_COMPONENTS,
    MDX_ESM,
)
from .posts import Document
from .utils import normalize_markdown_light

logger = logging.getLogger(__name__)

_JSX_COMMENT = re.compile(r'\{/\*.*?\*/\}', re.DOTALL)
_JSX_ATTR_EXPR = re.compile(
    r'(?P<name>[A-Za-z_:][-A-Za-z0-9_:.]*)=\{\s*'
    r'(?:"(?P<dq>[^"]*)"|\'(?P<sq>[^\']*)\'|(?P<num>-?[0-9.]+)|(?P<other>[^}]*))\s*\}'
)
_VOID_TAGS = {"img", "br", "hr"}
_INLINE_CODE = re.compile(r"(`+)[^`\n].*?\1")


def pad_block_html(md: str) -> str:
    lines, out, in_code = md.splitlines(), [], False
    for i, line in enumerate(lines):
        if line.strip().startswith(("```", "~~~")):
            in_code = not in_code
        if (not in_code) and BLOCK_HTML.match(line):
            if out and out[-1] != "":
                out.append("")
            out.append(line)
            if i + 1 < len(lines) and lines[i + 1].strip() != "":
                out.append("")
            continue
        out.append(line)
    return "\n".join(out)


def map_noncode(md: str, fn):
    parts, last = [], 0
    for m in FENCE.finditer(md):
        pre = md[last : m.start()]
        parts.append(fn(pre))
        parts.append(md[m.start() : m.end()])
        last = m.end()
    parts.append(fn(md[last:]))
    return "".join(parts)


def _map_non_inline_code(md: str, fn):
    parts, last = [], 0
    for m in _INLINE_CODE.finditer(md):
        parts.append(fn(md[last : m.start()]))
        parts.append(m.group(0))
        last = m.end()
    parts.append(fn(md[last:]))
    return "".join(parts)


def slugify_heading(text: str, separator: str = "-") -> str:
    s = text.strip().lower()
    s = re.sub(r"\s+", separator, s)
    s = re.sub(r"[^a-z0-9\-]", "", s)
    s = re.sub(r"-{2,}", "-", s).strip("-")
    return s or "section"


def _jsx_attrs_to_html(attrs: str) -> str:
    def _repl(m):
        value = m.group("dq")
        if value is None:
            value = m.group("sq")
        if value is None:
            value = m.group("num")
        if value is None:
            # arbitrary expressions have no static HTML equivalent
            return ""
        return f'{m.group("name")}="{value}"'

    return re.sub(r"\s{2,}", " ", _JSX_ATTR_EXPR.sub(_repl, attrs)).rstrip()


def drop_esm_blocks(md: str) -> str:
    """Remove `import`/`export` blocks.

    A block only counts as ESM when its first line starts with the keyword
    and it opens a block (start of text or after a blank line); it then runs
    to the next blank line. Paragraph continuation lines are kept as prose.
    """
    out, in_esm, block_start = [], False, True
    for line in md.split("\n"):
        if not line.strip():
            in_esm, block_start = False, True
            out.append(line)
            continue
        if block_start and MDX_ESM.match(line):
            in_esm = True
        block_start = False
        if not in_esm:
            out.append(line)
    return "\n".join(out)


def strip_mdx_syntax(md: str) -> str:
    """Reduce MDX-only syntax to plain Markdown/HTML.

    ESM blocks and JSX comments are dropped. Known components are rewritten
    to their HTML tag; unknown ones are removed, keeping any children.
    """

    def _self_closing(m):
        name = m.group("name")
        tag = MDX_COMPONENTS.get(name)
        if tag is None:
            logger.warning("dropping unknown MDX component <%s>", name)
            return ""
        return f"<{tag}{_jsx_attrs_to_html(m.group('attrs') or '')} />"

    def _open(m):
        name = m.group("name")
        tag = MDX_COMPONENTS.get(name)
        if tag is None:
            logger.warning("unwrapping unknown MDX component <%s>", name)
            return ""
        return f"<{tag}{_jsx_attrs_to_html(m.group('attrs') or '')}>"

    def _close(m):
        tag = MDX_COMPONENTS.get(m.group("name"))
        if tag is None or tag in _VOID_TAGS:
            return ""
        return f"</{tag}>"

    def _jsx(s: str) -> str:
        s = _JSX_COMMENT.sub("", s)
        s = JSX_SELF_CLOSING.sub(_self_closing, s)
        s = JSX_OPEN.sub(_open, s)
        return JSX_CLOSE.sub(_close, s)

    def _fn(s: str) -> str:
        return _map_non_inline_code(drop_esm_blocks(s), _jsx)

    return map_noncode(md, _fn)


def _markdown() -> markdown.Markdown:
    return markdown.Markdown(
        extensions=["tables", "sane_lists", "fenced_code", "codehilite", "toc"],
        extension_configs={
            "codehilite": {
                "pygments_style": CODE_THEME,
                "noclasses": True,
                "guess_lang": False,
            },
            "toc": {"slugify": slugify_heading},
        },
        output_format="html",
    )


def render_markdown(source: str) -> str:
    text = strip_mdx_syntax(source)
    text = map_noncode(text, pad_block_html)
    text = map_noncode(text, normalize_markdown_light)
    return _markdown().convert(text)


def render_document(doc: Document) -> str:
    return render_markdown(doc.body)
