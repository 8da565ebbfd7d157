"""Serialize a formatted document tree back to Markdown."""

from __future__ import annotations

import io
import logging
import re
from typing import TextIO

from mdtidy.exceptions import RenderError
from mdtidy.reflow import contains_link, repair_broken_links, trim_trailing_spaces, wrap_text
from mdtidy.schemas import (
    CodeBlock,
    Document,
    FormatterConfig,
    Heading,
    HeadingStyle,
    List,
    ListItem,
    Node,
    NodeKind,
    Paragraph,
    Text,
)

logger = logging.getLogger(__name__)

SETEXT_MIN_UNDERLINE = 3
_INDENT = "  "
_CODE_INDENT = "    "
_VALID_FENCES = ("```", "~~~")
# Empty HTML comment keeping two adjacent lists of the same type apart.
LIST_SEPARATOR = "<!-- -->"


class MarkdownRenderer:
    """Stateful serializer; every ``render`` call starts from an empty buffer."""

    def __init__(self) -> None:
        self._output = io.StringIO()
        self._config = FormatterConfig()

    def render(self, document: Document, config: FormatterConfig | None = None) -> str:
        """Render ``document`` to Markdown text.

        Raises:
            RenderError: A node could not be serialized. No partial output is
                returned.
        """
        if getattr(document, "kind", None) != NodeKind.DOCUMENT:
            raise RenderError(f"expected a document node, got {type(document).__name__}")

        result = self._serialize(document.children, config)
        result = collapse_blank_lines(result, self._config.whitespace.max_blank_lines)
        result = result.rstrip("\n")
        if result and self._config.whitespace.ensure_final_newline:
            result += "\n"
        logger.debug("Rendered document", extra={"chars": len(result)})
        return result

    def render_to(self, stream: TextIO, document: Document, config: FormatterConfig | None = None) -> None:
        """Render ``document`` and write the result to ``stream``."""
        stream.write(self.render(document, config))

    def render_block(self, node: Node, config: FormatterConfig | None = None) -> str:
        """Serialize one block node, without document-level whitespace clean-up."""
        return self._serialize([node], config)

    def _serialize(self, nodes: list[Node], config: FormatterConfig | None) -> str:
        self._output = io.StringIO()
        self._config = config or FormatterConfig()
        try:
            previous = None
            for node in nodes:
                if _lists_would_merge(previous, node):
                    self._write(f"{LIST_SEPARATOR}\n\n")
                self._render_node(node, 0)
                previous = node
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"failed to render document: {exc}") from exc
        return self._output.getvalue()

    def _write(self, text: str) -> None:
        self._output.write(text)

    def _render_node(self, node: Node, depth: int) -> None:
        kind = node.kind
        if kind == NodeKind.HEADING:
            self._render_heading(node)
        elif kind == NodeKind.PARAGRAPH:
            self._render_paragraph(node)
        elif kind == NodeKind.LIST:
            self._render_list(node, depth)
        elif kind == NodeKind.LIST_ITEM:
            raise RenderError("list items can only be rendered inside a list")
        elif kind == NodeKind.CODE_BLOCK:
            self._render_code_block(node)
        elif kind == NodeKind.TEXT:
            self._render_text(node)
        else:
            raise RenderError(f"unsupported node kind: {kind!r}")

    def _render_heading(self, heading: Heading) -> None:
        if not 1 <= heading.level <= 6:
            raise RenderError(f"heading level {heading.level} cannot be rendered")

        text = heading.text
        if heading.style == HeadingStyle.SETEXT and heading.level <= 2 and text.strip():
            marker = "=" if heading.level == 1 else "-"
            underline = marker * max(SETEXT_MIN_UNDERLINE, len(text.strip()))
            self._write(f"{text}\n{underline}\n\n")
            return

        prefix = "#" * heading.level
        self._write(f"{prefix} {text}\n\n" if text else f"{prefix}\n\n")

    def _render_paragraph(self, paragraph: Paragraph) -> None:
        content = repair_broken_links(paragraph.text)
        # Any link anywhere in the paragraph disables reflow for all of it.
        if self._config.line_width > 0 and not contains_link(content):
            content = wrap_text(content, self._config.line_width)
        self._write(f"{content}\n\n")

    def _render_list(self, node: List, depth: int) -> None:
        for number, item in enumerate(node.items, start=1):
            if getattr(item, "kind", None) != NodeKind.LIST_ITEM:
                raise RenderError(f"list contains a non-item node: {type(item).__name__}")
            self._render_list_item(item, node, number, depth + 1)
        if depth == 0:
            self._write("\n")

    def _render_list_item(self, item: ListItem, parent: List, number: int, depth: int) -> None:
        indent = _INDENT * (depth - 1)
        marker = item.marker or self._fallback_marker(parent, number)

        lines = item.text.split("\n") if item.text else []
        if item.tail:
            # Verbatim blocks follow the text after a blank line, or open the item.
            lines = [*lines, "", *item.tail.split("\n")] if lines else item.tail.split("\n")
        if lines:
            continuation = indent + " " * (len(marker) + 1)
            self._write(f"{indent}{marker} {lines[0]}\n")
            for line in lines[1:]:
                self._write(f"{continuation}{line}\n" if line else "\n")
        else:
            self._write(f"{indent}{marker}\n")

        for child in item.children:
            if child.kind != NodeKind.LIST:
                raise RenderError(f"list item children must be lists, got {child.kind!r}")
            self._render_list(child, depth)

    def _fallback_marker(self, parent: List, number: int) -> str:
        if parent.ordered:
            return f"{number}{self._config.lists.number_style}"
        return self._config.lists.bullet_style

    def _render_code_block(self, code: CodeBlock) -> None:
        content = code.content
        if not code.fenced:
            for line in content.splitlines():
                self._write(f"{_CODE_INDENT}{line}\n" if line.strip() else "\n")
            self._write("\n")
            return

        if code.fence not in _VALID_FENCES:
            raise RenderError(f"unsupported fence token: {code.fence!r}")
        fence = _fence_for(content, code.fence)
        self._write(f"{fence}{code.language}\n")
        self._write(content)
        if content and not content.endswith("\n"):
            self._write("\n")
        self._write(f"{fence}\n\n")

    def _render_text(self, text: Text) -> None:
        content = text.content
        if self._config.whitespace.trim_trailing_spaces:
            content = trim_trailing_spaces(content)
        content = content.rstrip("\n")
        if not content.strip():
            return
        self._write(f"{content}\n\n")


def _lists_would_merge(previous: Node | None, node: Node) -> bool:
    """Two sibling lists of the same type read back as one list."""
    if previous is None or previous.kind != NodeKind.LIST or node.kind != NodeKind.LIST:
        return False
    return previous.ordered == node.ordered


def _fence_for(content: str, fence: str) -> str:
    """Lengthen ``fence`` so that no line of ``content`` can close the block early."""
    char = fence[0]
    runs = re.findall(rf"^[ ]{{0,3}}({re.escape(char)}{{3,}})", content, re.MULTILINE)
    longest = max((len(run) for run in runs), default=0)
    if longest >= len(fence):
        return char * (longest + 1)
    return fence


def collapse_blank_lines(text: str, max_blank_lines: int) -> str:
    """Limit runs of blank lines to ``max_blank_lines``; negative disables."""
    if max_blank_lines < 0:
        return text

    result: list[str] = []
    consecutive = 0
    for line in text.split("\n"):
        if line.strip():
            consecutive = 0
            result.append(line)
            continue
        consecutive += 1
        if consecutive <= max_blank_lines:
            result.append(line)
    return "\n".join(result)


def render_document(document: Document, config: FormatterConfig | None = None) -> str:
    """Render with a fresh renderer."""
    return MarkdownRenderer().render(document, config)
