"""Shared schemas for mdtidy."""

from mdtidy.schemas.config import (
    CodeConfig,
    FilesConfig,
    FormatterConfig,
    HeadingConfig,
    ListConfig,
    WhitespaceConfig,
)
from mdtidy.schemas.nodes import (
    Block,
    CodeBlock,
    Document,
    Heading,
    HeadingStyle,
    List,
    ListItem,
    Node,
    NodeKind,
    Paragraph,
    Text,
)

__all__ = [
    "Block",
    "CodeBlock",
    "CodeConfig",
    "Document",
    "FilesConfig",
    "FormatterConfig",
    "Heading",
    "HeadingConfig",
    "HeadingStyle",
    "List",
    "ListConfig",
    "ListItem",
    "Node",
    "NodeKind",
    "Paragraph",
    "Text",
    "WhitespaceConfig",
]
