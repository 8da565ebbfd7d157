"""Custom exceptions for mdtidy."""


class MdtidyError(Exception):
    """Base exception for mdtidy operations."""


class ParseError(MdtidyError):
    """Error while turning markdown text into a document tree."""


class FormatError(MdtidyError):
    """A formatting rule could not be applied to a node."""


class RenderError(MdtidyError):
    """The renderer hit a node shape it cannot serialize."""


class ConfigError(MdtidyError):
    """Configuration could not be located, read, or validated."""


class ProcessingError(MdtidyError):
    """Error while reading or writing a markdown file."""
