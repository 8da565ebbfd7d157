"""Parse -> format -> render pipeline for a single document."""

from __future__ import annotations

import logging
import re

from mdtidy.engine import FormattingEngine
from mdtidy.exceptions import ParseError
from mdtidy.parser import MarkdownParser
from mdtidy.renderer import MarkdownRenderer
from mdtidy.schemas import FormatterConfig

logger = logging.getLogger(__name__)

_FRONT_MATTER_RE = re.compile(r"\A(---[ \t]*\n.*?\n(?:---|\.\.\.)[ \t]*)(?:\n|\Z)", re.DOTALL)


def decode_markdown(raw: bytes | str) -> str:
    """Decode raw file bytes as UTF-8, tolerating a byte order mark.

    Raises:
        ParseError: The bytes are not valid UTF-8.
    """
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError(f"input is not valid UTF-8: {exc}") from exc


def split_front_matter(text: str) -> tuple[str, str]:
    """Split a leading YAML front matter block from the Markdown body.

    Returns:
        ``(front_matter, body)``; ``front_matter`` is empty when absent.
    """
    normalized = text.replace("\r\n", "\n")
    match = _FRONT_MATTER_RE.match(normalized)
    if not match:
        return "", text
    return match.group(1), normalized[match.end() :]


def format_and_render(raw: bytes | str, config: FormatterConfig | None = None) -> str:
    """Format one Markdown document.

    Every call builds its own parser, engine and renderer, so calls share no
    state and may run concurrently.

    Args:
        raw: The document as bytes (UTF-8) or text.
        config: Formatting options. Uses defaults if None.

    Returns:
        The formatted Markdown text.

    Raises:
        ParseError: The input could not be decoded or parsed.
        FormatError: A formatting rule failed.
        RenderError: The formatted tree could not be serialized.
    """
    cfg = config or FormatterConfig()
    front_matter, body = split_front_matter(decode_markdown(raw))

    document = MarkdownParser().parse(body)
    FormattingEngine().format(document, cfg)
    rendered = MarkdownRenderer().render(document, cfg)

    if front_matter:
        separator = "\n\n" if rendered else ("\n" if cfg.whitespace.ensure_final_newline else "")
        rendered = f"{front_matter}{separator}{rendered}"
    logger.debug("Formatted markdown", extra={"front_matter": bool(front_matter), "chars": len(rendered)})
    return rendered


def format_text(text: str, config: FormatterConfig | None = None) -> str:
    """Format Markdown given as text."""
    return format_and_render(text, config)


def is_formatted(raw: bytes | str, config: FormatterConfig | None = None) -> bool:
    """Return True when formatting would not change ``raw`` beyond surrounding whitespace."""
    original = decode_markdown(raw)
    return original.strip() == format_and_render(original, config).strip()
