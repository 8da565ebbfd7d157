"""Per-node formatting rules applied by the formatting engine."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from mdtidy.exceptions import FormatError
from mdtidy.reflow import (
    collapse_all_whitespace,
    collapse_whitespace,
    repair_broken_links,
    trim_trailing_spaces,
    wrap_text,
)
from mdtidy.schemas import (
    CodeBlock,
    FormatterConfig,
    Heading,
    HeadingStyle,
    List,
    ListItem,
    Node,
    NodeKind,
    Paragraph,
)

HEADING_PRIORITY = 100
PARAGRAPH_PRIORITY = 90
LIST_PRIORITY = 80
CODE_PRIORITY = 70
INLINE_PRIORITY = 60
WHITESPACE_PRIORITY = 10

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6
SETEXT_MAX_LEVEL = 2

_PROTECTED_RE = re.compile(
    r"(`+)(.+?)\1|<(pre|code)\b[^>]*>.*?</\3\s*>|(?<=\])\([^)]*\)|<[^<>\n]+>",
    re.DOTALL | re.IGNORECASE,
)
_UNDERSCORE_EMPHASIS_RE = re.compile(r"\b_([^_]+)_\b")
_PADDED_LINK_LABEL_RE = re.compile(r"\[[ \t]*([^\]\s](?:[^\]]*[^\]\s])?)[ \t]*\]")


class Rule(ABC):
    """A formatting rule claiming one or more node kinds.

    Subclasses set ``name``, ``priority`` (higher runs first) and ``kinds``.
    An empty ``kinds`` claims every node kind.
    """

    name: str = "rule"
    priority: int = 0
    kinds: frozenset[NodeKind] = frozenset()

    def applies_to(self, node: Node) -> bool:
        return not self.kinds or node.kind in self.kinds

    @abstractmethod
    def apply(self, node: Node, config: FormatterConfig) -> None:
        """Mutate ``node`` in place. Raise ``FormatError`` on malformed input."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


class HeadingRule(Rule):
    """Pick the heading notation, clamp levels and trim heading text."""

    name = "heading"
    priority = HEADING_PRIORITY
    kinds = frozenset({NodeKind.HEADING})

    def apply(self, node: Heading, config: FormatterConfig) -> None:
        if not isinstance(node.level, int):
            raise FormatError(f"heading level must be an integer, got {node.level!r}")

        if config.heading.normalize_levels:
            node.level = min(MAX_HEADING_LEVEL, max(MIN_HEADING_LEVEL, node.level))
        elif not MIN_HEADING_LEVEL <= node.level <= MAX_HEADING_LEVEL:
            raise FormatError(
                f"heading level {node.level} is outside {MIN_HEADING_LEVEL}-{MAX_HEADING_LEVEL} "
                "and level normalization is disabled"
            )

        # Setext only has underlines for the first two levels.
        if config.heading.style == HeadingStyle.SETEXT and node.level <= SETEXT_MAX_LEVEL:
            node.style = HeadingStyle.SETEXT
        else:
            node.style = HeadingStyle.ATX

        node.text = node.text.strip()


class ParagraphRule(Rule):
    """Reflow paragraphs to the configured width and tidy whitespace."""

    name = "paragraph"
    priority = PARAGRAPH_PRIORITY
    kinds = frozenset({NodeKind.PARAGRAPH})

    def apply(self, node: Paragraph, config: FormatterConfig) -> None:
        text = node.text
        if config.line_width > 0:
            text = wrap_text(repair_broken_links(text), config.line_width)
        node.text = collapse_whitespace(text.strip())


class ListRule(Rule):
    """Assign markers list by list and tidy item text.

    Numbering restarts at 1 for every list, nested ones included.
    """

    name = "list"
    priority = LIST_PRIORITY
    kinds = frozenset({NodeKind.LIST, NodeKind.LIST_ITEM})

    def apply(self, node: List | ListItem, config: FormatterConfig) -> None:
        if node.kind == NodeKind.LIST:
            self._format_list(node, config)
        else:
            self._format_item(node, config)

    def _format_list(self, node: List, config: FormatterConfig) -> None:
        for item in node.items:
            if not isinstance(item, ListItem):
                raise FormatError(f"list contains a non-item node: {type(item).__name__}")

        if node.ordered:
            number_style = config.lists.number_style
            node.marker = number_style
            for index, item in enumerate(node.items, start=1):
                item.marker = f"{index}{number_style}"
        else:
            bullet = config.lists.bullet_style
            node.marker = bullet
            for item in node.items:
                item.marker = bullet

        for item in node.items:
            if config.lists.consistent_indentation:
                item.text = collapse_all_whitespace(item.text)
            self._format_nested(item, config)

    def _format_item(self, node: ListItem, config: FormatterConfig) -> None:
        if config.lists.consistent_indentation:
            node.text = collapse_all_whitespace(node.text)
        self._format_nested(node, config)

    def _format_nested(self, item: ListItem, config: FormatterConfig) -> None:
        for child in item.children:
            if child.kind != NodeKind.LIST:
                raise FormatError(f"list item children must be lists, got {child.kind!r}")
            self._format_list(child, config)


class CodeBlockRule(Rule):
    """Rewrite fence tokens; code content is never touched."""

    name = "code"
    priority = CODE_PRIORITY
    kinds = frozenset({NodeKind.CODE_BLOCK})

    def apply(self, node: CodeBlock, config: FormatterConfig) -> None:
        if node.fenced:
            node.fence = config.code.fence_style
        if config.code.language_detection:
            node.language = self.detect_language(node)

    def detect_language(self, node: CodeBlock) -> str:
        """Hook for guessing a language tag; keeps the existing tag."""
        return node.language


class InlineRule(Rule):
    """Best-effort clean-up of inline markup outside code spans.

    Collapses padding inside inline code spans, turns ``_emphasis_`` into
    ``*emphasis*`` at word boundaries and strips spaces inside link labels.
    Verbatim text (blocks holding code or raw HTML) is left alone.
    """

    name = "inline"
    priority = INLINE_PRIORITY
    kinds = frozenset({NodeKind.TEXT, NodeKind.PARAGRAPH})

    def apply(self, node: Node, config: FormatterConfig) -> None:
        if node.kind == NodeKind.TEXT:
            if not node.verbatim:
                node.content = normalize_inline(node.content)
        elif node.kind == NodeKind.PARAGRAPH:
            node.text = normalize_inline(node.text)


def normalize_inline(text: str) -> str:
    """Apply the inline substitutions.

    Code span content, ``<pre>``/``<code>`` elements, link destinations and
    angle-bracket autolinks or raw HTML tags are copied through untouched.
    """
    pieces: list[str] = []
    last = 0
    for match in _PROTECTED_RE.finditer(text):
        pieces.append(_normalize_prose(text[last : match.start()]))
        if match.group(1):
            pieces.append(_unpad_code_span(match.group(1), match.group(2)))
        else:
            pieces.append(match.group(0))
        last = match.end()
    pieces.append(_normalize_prose(text[last:]))
    return "".join(pieces)


def _unpad_code_span(ticks: str, content: str) -> str:
    stripped = content.strip()
    # Content touching a backtick needs its padding to stay a valid span.
    if not stripped or stripped[0] == "`" or stripped[-1] == "`":
        return f"{ticks}{content}{ticks}"
    return f"{ticks}{stripped}{ticks}"


def _normalize_prose(text: str) -> str:
    text = _UNDERSCORE_EMPHASIS_RE.sub(r"*\1*", text)
    return _PADDED_LINK_LABEL_RE.sub(r"[\1]", text)


class WhitespaceRule(Rule):
    """Trim trailing spaces per line. Catches every kind no other rule claims."""

    name = "whitespace"
    priority = WHITESPACE_PRIORITY
    kinds = frozenset()

    def apply(self, node: Node, config: FormatterConfig) -> None:
        if not config.whitespace.trim_trailing_spaces:
            return
        if node.kind == NodeKind.PARAGRAPH:
            node.text = trim_trailing_spaces(node.text)
        elif node.kind == NodeKind.HEADING:
            node.text = node.text.strip()
        elif node.kind == NodeKind.TEXT:
            node.content = trim_trailing_spaces(node.content)
        elif node.kind == NodeKind.CODE_BLOCK:
            # Leading indentation is significant; only line ends are touched.
            node.content = trim_trailing_spaces(node.content)


def default_rules() -> list[Rule]:
    """Built-in rules in registration order."""
    return [
        HeadingRule(),
        ParagraphRule(),
        ListRule(),
        CodeBlockRule(),
        InlineRule(),
        WhitespaceRule(),
    ]
