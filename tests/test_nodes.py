"""Tests for the document tree models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mdtidy.schemas import (
    CodeBlock,
    Document,
    Heading,
    List,
    ListItem,
    NodeKind,
    Paragraph,
    Text,
)
from mdtidy.schemas.nodes import debug_string, find_nodes, walk


@pytest.fixture
def nested_document() -> Document:
    inner = List(ordered=True, items=[ListItem(text="inner")])
    return Document(
        children=[
            Heading(level=1, text="Title"),
            List(items=[ListItem(text="outer", children=[inner]), ListItem(text="last")]),
            CodeBlock(language="sh", content="ls\n"),
        ]
    )


class TestWalk:
    """Tests for tree traversal."""

    def test_pre_order(self, nested_document: Document) -> None:
        """Nodes are yielded parent first, list items before their nested lists."""
        kinds = [node.kind for node in walk(nested_document)]
        assert kinds == [
            NodeKind.DOCUMENT,
            NodeKind.HEADING,
            NodeKind.LIST,
            NodeKind.LIST_ITEM,
            NodeKind.LIST,
            NodeKind.LIST_ITEM,
            NodeKind.LIST_ITEM,
            NodeKind.CODE_BLOCK,
        ]

    def test_find_nodes(self, nested_document: Document) -> None:
        """find_nodes filters by kind."""
        items = find_nodes(nested_document, NodeKind.LIST_ITEM)
        assert [item.text for item in items] == ["outer", "inner", "last"]


class TestModels:
    """Tests for model construction."""

    def test_kind_tags(self) -> None:
        """Every variant carries its kind tag."""
        assert Paragraph().kind == NodeKind.PARAGRAPH
        assert Text().kind == NodeKind.TEXT
        assert Document().kind == NodeKind.DOCUMENT

    def test_blocks_from_dicts(self) -> None:
        """Blocks are discriminated on their kind when validating raw data."""
        document = Document.model_validate(
            {
                "children": [
                    {"kind": "paragraph", "text": "hi"},
                    {"kind": "list", "items": [{"text": "a", "children": [{"kind": "list"}]}]},
                ]
            }
        )
        assert isinstance(document.children[0], Paragraph)
        assert isinstance(document.children[1].items[0].children[0], List)

    def test_unknown_kind_rejected(self) -> None:
        """Validation fails for an unknown block kind."""
        with pytest.raises(ValidationError):
            Document.model_validate({"children": [{"kind": "table"}]})

    def test_code_block_defaults(self) -> None:
        """Code blocks default to backtick fences."""
        block = CodeBlock()
        assert block.fenced is True
        assert block.fence == "```"


class TestDebugString:
    """Tests for debug_string."""

    def test_outline(self, nested_document: Document) -> None:
        """The outline is indented by tree depth."""
        assert debug_string(nested_document) == (
            "Document\n"
            "  Heading(level=1, text='Title', style=atx)\n"
            "  List(ordered=False, items=2)\n"
            "    ListItem(marker='', text='outer')\n"
            "      List(ordered=True, items=1)\n"
            "        ListItem(marker='', text='inner')\n"
            "    ListItem(marker='', text='last')\n"
            "  CodeBlock(lang='sh', fenced=True)\n"
        )
