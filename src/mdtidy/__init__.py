"""mdtidy: normalize Markdown formatting."""

__version__ = "0.1.0"

from mdtidy.engine import FormattingEngine
from mdtidy.exceptions import (
    ConfigError,
    FormatError,
    MdtidyError,
    ParseError,
    ProcessingError,
    RenderError,
)
from mdtidy.parser import MarkdownParser, parse_markdown
from mdtidy.pipeline import format_and_render, format_text, is_formatted
from mdtidy.renderer import MarkdownRenderer, render_document
from mdtidy.schemas import Document, FormatterConfig

__all__ = [
    "ConfigError",
    "Document",
    "FormatError",
    "FormatterConfig",
    "FormattingEngine",
    "MarkdownParser",
    "MarkdownRenderer",
    "MdtidyError",
    "ParseError",
    "ProcessingError",
    "RenderError",
    "__version__",
    "format_and_render",
    "format_text",
    "is_formatted",
    "parse_markdown",
    "render_document",
]
