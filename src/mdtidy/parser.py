"""Build mdtidy document trees from Markdown using markdown-it-py."""

from __future__ import annotations

import logging
import re
from typing import Iterable

try:
    from markdown_it import MarkdownIt
    from markdown_it.tree import SyntaxTreeNode
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "markdown-it-py is required for Markdown parsing (pip install markdown-it-py)."
    ) from exc

from mdtidy.exceptions import ParseError
from mdtidy.schemas import (
    Block,
    CodeBlock,
    Document,
    Heading,
    HeadingStyle,
    List,
    ListItem,
    Paragraph,
    Text,
)

logger = logging.getLogger(__name__)

_LIST_TYPES = {"bullet_list", "ordered_list"}
_VERBATIM_TYPES = {"fence", "code_block", "html_block"}
_ITEM_MARKER_RE = re.compile(r"[ ]*(?:\d{1,9}[.)]|[-+*])")


class MarkdownParser:
    """Parser adapter producing the constrained tree the formatter works on.

    Headings, paragraphs, lists and code blocks are mapped to their own node
    types. Every other block is kept as a ``Text`` node holding its exact
    source lines.
    """

    def __init__(self) -> None:
        md = MarkdownIt("commonmark")
        md.enable(["table", "strikethrough"])
        # Keep escapes and entities as written instead of merging them into text.
        md.disable("text_join")
        self._md = md

    def parse(self, content: str) -> Document:
        """Parse ``content`` into a ``Document``.

        Raises:
            ParseError: markdown-it failed on the input.
        """
        source = content.replace("\r\n", "\n").replace("\r", "\n")
        try:
            tokens = self._md.parse(source)
        except Exception as exc:
            raise ParseError(f"failed to parse markdown: {exc}") from exc

        lines = source.split("\n")
        root = SyntaxTreeNode(tokens)
        children = [block for block in (self._convert_block(node, lines) for node in root.children) if block]
        logger.debug("Parsed markdown", extra={"blocks": len(children)})
        return Document(children=children)

    def _convert_block(self, node: SyntaxTreeNode, lines: list[str]) -> Block | None:
        if node.type == "heading":
            return self._convert_heading(node)
        if node.type == "paragraph":
            return Paragraph(text=_inline_text(node))
        if node.type in _LIST_TYPES:
            return self._convert_list(node, lines)
        if node.type == "fence":
            return CodeBlock(
                language=node.info.strip(),
                content=node.content,
                fenced=True,
                fence="~~~" if node.markup.startswith("~") else "```",
            )
        if node.type == "code_block":
            return CodeBlock(content=node.content, fenced=False)

        raw = _source_text(node, lines)
        if not raw.strip():
            return None
        return Text(content=raw, verbatim=_holds_code(node))

    def _convert_heading(self, node: SyntaxTreeNode) -> Heading:
        style = HeadingStyle.ATX if node.markup.startswith("#") else HeadingStyle.SETEXT
        text = " ".join(_inline_text(node).split())
        return Heading(level=int(node.tag[1:]), text=text, style=style)

    def _convert_list(self, node: SyntaxTreeNode, lines: list[str]) -> List:
        ordered = node.type == "ordered_list"
        result = List(ordered=ordered, marker=node.markup)
        for child in node.children:
            if child.type == "list_item":
                result.items.append(self._convert_list_item(child, ordered, lines))
        return result

    def _convert_list_item(self, node: SyntaxTreeNode, ordered: bool, lines: list[str]) -> ListItem:
        marker = f"{node.info}{node.markup}" if ordered else node.markup
        rest = list(node.children)
        text = ""
        if rest and rest[0].type == "paragraph":
            text = _inline_text(rest.pop(0))

        # Two sibling lists only exist with different markers; normalized markers
        # would merge them, so they are kept verbatim below.
        if len(rest) <= 1 and all(child.type in _LIST_TYPES for child in rest):
            nested = [self._convert_list(child, lines) for child in rest]
            return ListItem(text=text, marker=marker, children=nested)

        # Anything past the leading paragraph that is not just nested lists
        # is kept as written, relative to the item's content column.
        first = node.map[0] if node.map else -1
        offset = _content_offset(lines[first]) if node.map else 0
        start, end = rest[0].map[0], rest[-1].map[1]
        kept = []
        for index in range(start, end):
            # The block may open on the marker line itself.
            line = lines[index][offset:] if index == first else _dedent(lines[index], offset)
            kept.append(line)
        tail = "\n".join(kept).strip("\n")
        return ListItem(text=text, marker=marker, tail=tail)


def _source_text(node: SyntaxTreeNode, lines: list[str]) -> str:
    if node.map is None:
        return node.content
    start, end = node.map
    return "\n".join(lines[start:end]).rstrip("\n")


def _holds_code(node: SyntaxTreeNode) -> bool:
    """Return True if a block is, or contains, code or raw HTML."""
    if node.type in _VERBATIM_TYPES:
        return True
    return any(_holds_code(child) for child in node.children if child.type != "inline")


def _content_offset(first_line: str) -> int:
    """Column where a list item's content starts, given the item's first line."""
    match = _ITEM_MARKER_RE.match(first_line)
    if not match:
        return 0
    after = first_line[match.end() :]
    spaces = len(after) - len(after.lstrip(" "))
    # A blank first line or an indented code start means one space of padding.
    if not after.strip() or spaces > 4:
        spaces = 1
    return match.end() + spaces


def _dedent(line: str, offset: int) -> str:
    indent = len(line) - len(line.lstrip(" "))
    return line[min(indent, offset) :]


def _inline_text(block: SyntaxTreeNode) -> str:
    parts = [serialize_inline(child.children) for child in block.children if child.type == "inline"]
    return "".join(parts).strip()


def serialize_inline(nodes: Iterable[SyntaxTreeNode]) -> str:
    """Turn inline syntax nodes back into Markdown source tokens."""
    parts: list[str] = []
    for node in nodes:
        kind = node.type
        if kind == "text":
            parts.append(node.content)
        elif kind == "text_special":
            parts.append(node.markup or node.content)
        elif kind in ("softbreak", "hardbreak"):
            parts.append("\n")
        elif kind == "code_inline":
            parts.append(_code_span(node.markup, node.content))
        elif kind in ("em", "strong", "s"):
            parts.append(f"{node.markup}{serialize_inline(node.children)}{node.markup}")
        elif kind == "link":
            parts.append(_link(node))
        elif kind == "image":
            destination = _destination(node.attrs.get("src", ""), node.attrs.get("title"))
            parts.append(f"![{serialize_inline(node.children)}]({destination})")
        elif kind == "html_inline":
            parts.append(node.content)
        elif node.children:
            parts.append(serialize_inline(node.children))
        else:
            parts.append(node.content)
    return "".join(parts)


def _code_span(ticks: str, content: str) -> str:
    ticks = ticks or "`"
    # CommonMark strips one space from each side, so add it back when needed.
    touches_tick = content.startswith("`") or content.endswith("`")
    padded = content.startswith(" ") and content.endswith(" ") and content.strip() != ""
    pad = " " if touches_tick or padded else ""
    return f"{ticks}{pad}{content}{pad}{ticks}"


def _link(node: SyntaxTreeNode) -> str:
    label = serialize_inline(node.children)
    if node.markup == "autolink":
        return f"<{label}>"
    destination = _destination(str(node.attrs.get("href", "")), node.attrs.get("title"))
    return f"[{label}]({destination})"


def _destination(href: object, title: object | None) -> str:
    href = str(href)
    if any(ch.isspace() for ch in href):
        href = f"<{href}>"
    if title:
        escaped = str(title).replace('"', '\\"')
        return f'{href} "{escaped}"'
    return href


def parse_markdown(content: str) -> Document:
    """Parse with a fresh ``MarkdownParser``."""
    return MarkdownParser().parse(content)
