"""Document tree models.

The tree is built once by the parser adapter, mutated in place by the
formatting engine and read by the renderer. Every node carries an explicit
``kind`` tag so that callers dispatch on the tag rather than on the class.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Iterator, Literal, Union

from pydantic import BaseModel, Field


class NodeKind(str, Enum):
    """Tags for every node variant in the tree."""

    DOCUMENT = "document"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    LIST_ITEM = "list_item"
    CODE_BLOCK = "code_block"
    TEXT = "text"


class HeadingStyle(str, Enum):
    """Heading notations."""

    ATX = "atx"
    SETEXT = "setext"


class Heading(BaseModel):
    """A heading; ``level`` is validated by the formatting rules, not here."""

    kind: Literal["heading"] = "heading"
    level: int
    text: str = ""
    style: HeadingStyle = HeadingStyle.ATX


class Paragraph(BaseModel):
    """A paragraph of inline markup, possibly spanning several lines."""

    kind: Literal["paragraph"] = "paragraph"
    text: str = ""


class ListItem(BaseModel):
    """A single list entry.

    ``children`` only ever holds nested lists. ``tail`` keeps any other block
    content of the item (code, quotes, further paragraphs) as verbatim source
    with the item's indentation removed; when it is set, ``children`` is empty.
    """

    kind: Literal["list_item"] = "list_item"
    text: str = ""
    marker: str = ""
    children: list["List"] = Field(default_factory=list)
    tail: str = ""


class List(BaseModel):
    """An ordered or unordered list."""

    kind: Literal["list"] = "list"
    ordered: bool = False
    marker: str = ""
    items: list[ListItem] = Field(default_factory=list)


class CodeBlock(BaseModel):
    """A fenced or indented code block. ``content`` is whitespace-significant."""

    kind: Literal["code_block"] = "code_block"
    language: str = ""
    content: str = ""
    fenced: bool = True
    fence: str = "```"


class Text(BaseModel):
    """Opaque block content passed through without interpretation.

    ``verbatim`` marks content that holds code or raw HTML and must not get
    inline clean-up.
    """

    kind: Literal["text"] = "text"
    content: str = ""
    verbatim: bool = False


Block = Annotated[
    Union[Heading, Paragraph, List, CodeBlock, Text],
    Field(discriminator="kind"),
]


class Document(BaseModel):
    """Root of the tree; never nested."""

    kind: Literal["document"] = "document"
    children: list[Block] = Field(default_factory=list)


ListItem.model_rebuild()

Node = Union[Document, Heading, Paragraph, List, ListItem, CodeBlock, Text]


def walk(document: Document) -> Iterator[Node]:
    """Yield every node in pre-order, starting with the document itself."""
    yield document
    for child in document.children:
        yield from _walk_block(child)


def _walk_block(node: Node) -> Iterator[Node]:
    yield node
    if node.kind == NodeKind.LIST:
        for item in node.items:
            yield item
            for nested in item.children:
                yield from _walk_block(nested)


def find_nodes(document: Document, kind: NodeKind | str) -> list[Node]:
    """Return all nodes of ``kind`` in pre-order."""
    return [node for node in walk(document) if node.kind == kind]


def describe(node: Node) -> str:
    if node.kind == NodeKind.HEADING:
        return f"Heading(level={node.level}, text={node.text!r}, style={HeadingStyle(node.style).value})"
    if node.kind == NodeKind.PARAGRAPH:
        return f"Paragraph(text={node.text!r})"
    if node.kind == NodeKind.LIST:
        return f"List(ordered={node.ordered}, items={len(node.items)})"
    if node.kind == NodeKind.LIST_ITEM:
        return f"ListItem(marker={node.marker!r}, text={node.text!r})"
    if node.kind == NodeKind.CODE_BLOCK:
        return f"CodeBlock(lang={node.language!r}, fenced={node.fenced})"
    if node.kind == NodeKind.TEXT:
        return f"Text(content={node.content!r})"
    return "Document"


def debug_string(document: Document) -> str:
    """Render an indented outline of the tree, one node per line."""
    lines = ["Document"]

    def _visit(node: Node, depth: int) -> None:
        lines.append("  " * depth + describe(node))
        if node.kind == NodeKind.LIST:
            for item in node.items:
                lines.append("  " * (depth + 1) + describe(item))
                for nested in item.children:
                    _visit(nested, depth + 2)

    for child in document.children:
        _visit(child, 1)
    return "\n".join(lines) + "\n"
