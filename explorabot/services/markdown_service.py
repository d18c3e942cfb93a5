"""
Chat-bubble markup → HTML.

Handles the small subset the response templates use: fenced code blocks,
inline code, bold, links, bullet markers and line breaks.
"""

import html
import re

from loguru import logger

_FENCE = re.compile(r"```[^\n`]*\n?(.*?)```", re.DOTALL)
_INLINE_CODE = re.compile(r"`([^`\n]+)`")
_BOLD = re.compile(r"\*\*([^*]+)\*\*")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_BULLET = re.compile(r"^• ", re.MULTILINE)

_SAFE_URL = re.compile(r"^(https?://|/(?![/\\])|#)", re.IGNORECASE)

# Placeholders must survive html.escape and the inline passes unchanged
_SLOT = "\x00{}\x00"
_SLOT_RE = re.compile(r"\x00(\d+)\x00")


def _link(match: re.Match) -> str:
    text, url = match.group(1), match.group(2)
    if not _SAFE_URL.match(html.unescape(url)):
        return match.group(0)
    return f'<a href="{url}" target="_blank" rel="noopener">{text}</a>'


def render_markdown(text) -> str:
    if not isinstance(text, str) or not text:
        return ""

    try:
        blocks = []

        def stash(match: re.Match) -> str:
            blocks.append(match.group(1).rstrip("\n"))
            return _SLOT.format(len(blocks) - 1)

        # NULs are reserved for the placeholders
        out = _FENCE.sub(stash, text.replace("\x00", ""))
        out = html.escape(out, quote=True)
        out = _INLINE_CODE.sub(r"<code>\1</code>", out)
        out = _BOLD.sub(r"<strong>\1</strong>", out)
        out = _LINK.sub(_link, out)
        out = _BULLET.sub("&bull; ", out)
        out = out.replace("\n", "<br>")
        return _SLOT_RE.sub(
            lambda m: f"<pre><code>{html.escape(blocks[int(m.group(1))])}</code></pre>",
            out,
        )
    except Exception as e:
        logger.error(f"Markdown render error: {e}")
        return html.escape(text).replace("\n", "<br>")
