"""Text reflow and link-aware tokenization shared by the rules and renderer."""

from __future__ import annotations

import re

LINK_RE = re.compile(r"\[[^\]]*\]\([^)]*\)")
_BROKEN_LINK_RE = re.compile(r"\[([^\]]*\n[^\]]*)\]\(([^)]*)\)")
_LABEL_BREAK_RE = re.compile(r"[ \t]*\n[ \t]*")
_TOKEN_RE = re.compile(r"\S+")
# Whole tokens that open a list, heading, thematic break or setext underline.
_BLOCK_MARKER_RE = re.compile(r"[-+*]|#{1,6}|\d{1,9}[.)]|=+|-+|[*_]{3,}")
_BLOCK_PREFIXES = (">", "```", "~~~", "<")
_AUTOLINK_RE = re.compile(r"<[A-Za-z][A-Za-z0-9+.-]{1,31}:[^<>\s]*>|<[^<>\s@]+@[^<>\s]+>")
# Stand-in for whitespace inside links while splitting.
_GLUE = "\x00"


def contains_link(text: str) -> bool:
    """Return True if ``text`` holds at least one ``[label](destination)`` construct."""
    return LINK_RE.search(text) is not None


def repair_broken_links(text: str) -> str:
    """Rejoin link constructs whose label was split across lines.

    Every line break inside a label (with the spaces around it) becomes a
    single space. Repeats until no broken link remains.
    """

    def _join(match: re.Match[str]) -> str:
        label = _LABEL_BREAK_RE.sub(" ", match.group(1))
        return f"[{label}]({match.group(2)})"

    while True:
        repaired = _BROKEN_LINK_RE.sub(_join, text)
        if repaired == text:
            return repaired
        text = repaired


def tokenize(text: str) -> list[str]:
    """Split text on whitespace, keeping each link construct in a single token.

    Characters glued to a link (``![alt](src)``, ``([a](b)),``) stay in the
    same token as the link.
    """
    masked = list(text)
    for match in LINK_RE.finditer(text):
        for index in range(match.start(), match.end()):
            if masked[index].isspace():
                masked[index] = _GLUE
    return [text[m.start() : m.end()] for m in _TOKEN_RE.finditer("".join(masked))]


def starts_block(token: str) -> bool:
    """Return True if ``token`` at the start of a line would begin a new block."""
    if _BLOCK_MARKER_RE.fullmatch(token):
        return True
    return token.startswith(_BLOCK_PREFIXES) and not _AUTOLINK_RE.fullmatch(token)


def wrap_text(text: str, width: int) -> str:
    """Greedily re-break ``text`` into lines of at most ``width`` characters.

    A token longer than ``width`` sits alone on its own line and is never
    split. A token that would open a block (list marker, heading marker,
    quote, fence, setext underline, HTML tag) is never moved to the start of
    a line; it stays at the end of the previous one even past ``width``.
    A non-positive width returns the text unchanged.
    """
    if width <= 0:
        return text

    tokens = tokenize(text)
    if not tokens:
        return text

    lines: list[str] = []
    current = ""
    for token in tokens:
        if current and len(current) + 1 + len(token) > width and not starts_block(token):
            lines.append(current)
            current = ""
        current = f"{current} {token}" if current else token
    lines.append(current)
    return "\n".join(lines)


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to one space within each line, keeping line breaks."""
    return "\n".join(" ".join(line.split()) for line in text.split("\n"))


def collapse_all_whitespace(text: str) -> str:
    """Collapse every whitespace run, line breaks included, to a single space."""
    return " ".join(text.split())


def trim_trailing_spaces(text: str) -> str:
    """Strip trailing spaces and tabs from every line."""
    return "\n".join(line.rstrip(" \t") for line in text.split("\n"))
