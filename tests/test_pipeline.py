"""End-to-end tests for the parse, format and render pipeline."""

from __future__ import annotations

import pytest

from mdtidy import format_and_render, format_text, is_formatted
from mdtidy.exceptions import ParseError
from mdtidy.pipeline import decode_markdown, split_front_matter
from mdtidy.schemas import FormatterConfig


class TestFormatAndRender:
    """Tests for format_and_render."""

    def test_heading_and_paragraph(self, config: FormatterConfig) -> None:
        """Spaces collapse and the output ends in one newline."""
        assert format_and_render("#### Deep\n\nfoo   bar", config) == "#### Deep\n\nfoo bar\n"

    def test_setext_output(self) -> None:
        """Setext headings are produced when configured."""
        config = FormatterConfig.model_validate({"heading": {"style": "setext"}})
        assert format_and_render("# Hi\n\n### Deep\n", config) == "Hi\n===\n\n### Deep\n"

    def test_long_link_kept_whole(self) -> None:
        """Links are never split when a paragraph is reflowed."""
        config = FormatterConfig(line_width=20)
        source = "Check [the docs](http://example.com/very/long/path) now"
        assert format_and_render(source, config) == "Check\n[the docs](http://example.com/very/long/path)\nnow\n"

    def test_lists_normalized(self, config: FormatterConfig) -> None:
        """Bullets and numbers are rewritten."""
        source = "* a\n+ b\n\n5. x\n9. y\n"
        # A new bullet character starts a new list in CommonMark.
        assert format_and_render(source, config) == "- a\n\n<!-- -->\n\n- b\n\n1. x\n2. y\n"

    def test_code_fence_rewritten(self, config: FormatterConfig) -> None:
        """Tilde fences become backticks; content is untouched."""
        source = "~~~sh\necho   hi  \n~~~\n"
        assert format_and_render(source, config) == "```sh\necho   hi  \n```\n"

    def test_opaque_blocks_preserved(self, config: FormatterConfig) -> None:
        """Blockquotes pass through with inline clean-up only."""
        source = "> a _b_ quote   \n"
        assert format_and_render(source, config) == "> a *b* quote\n"

    def test_bytes_input(self, config: FormatterConfig) -> None:
        """UTF-8 bytes, with or without a byte order mark, are accepted."""
        assert format_and_render("\ufeff# Café\n".encode("utf-8"), config) == "# Café\n"

    def test_invalid_utf8(self, config: FormatterConfig) -> None:
        """Undecodable input is a parse error."""
        with pytest.raises(ParseError):
            format_and_render(b"# \xff\xfe bad\n", config)

    def test_empty_input(self, config: FormatterConfig) -> None:
        """Empty input stays empty."""
        assert format_and_render("", config) == ""
        assert format_and_render("\n\n", config) == ""

    def test_default_config(self) -> None:
        """config may be omitted."""
        assert format_text("#  x") == "# x\n"

    def test_idempotent(self, config: FormatterConfig, sample_markdown: str) -> None:
        """Formatting formatted output changes nothing."""
        once = format_and_render(sample_markdown, config)
        assert format_and_render(once, config) == once

    def test_quoted_fence_untouched(self, config: FormatterConfig) -> None:
        """Code fenced inside a block quote gets no inline clean-up."""
        source = "> ~~~\n> a _b_ c\n> ~~~\n"
        assert format_and_render(source, config) == source

    def test_pre_block_untouched(self, config: FormatterConfig) -> None:
        """Raw <pre> blocks keep underscores as written."""
        source = "<pre>\nmy _var_ here\n</pre>\n"
        assert format_and_render(source, config) == source

    def test_code_inside_list_item_kept(self, config: FormatterConfig) -> None:
        """A fence under a list item keeps its lines and indentation."""
        source = "- item\n\n  ```\n  x  =  1\n  y = 2\n  ```\n"
        once = format_and_render(source, config)
        assert once == source
        assert format_and_render(once, config) == once

    def test_item_opening_with_code(self, config: FormatterConfig) -> None:
        """An item whose first block is a fence keeps it under the marker."""
        source = "* ```\n  a  b\n  ```\n"
        once = format_and_render(source, config)
        assert once == "- ```\n  a  b\n  ```\n"
        assert format_and_render(once, config) == once

    @pytest.mark.parametrize(
        "source",
        [
            "- a\n\n* b\n",
            "1. a\n\n1) b\n",
            "* a\n+ b\n- c\n",
        ],
    )
    def test_adjacent_lists_stay_apart(self, config: FormatterConfig, source: str) -> None:
        """Lists that only differed by marker are not merged on the next run."""
        once = format_and_render(source, config)
        assert "<!-- -->" in once
        assert format_and_render(once, config) == once

    def test_adjacent_lists_output(self, config: FormatterConfig) -> None:
        """The separator sits between the two lists."""
        assert format_and_render("- a\n\n* b\n", config) == "- a\n\n<!-- -->\n\n- b\n"

    def test_reflow_never_opens_list(self) -> None:
        """A wrapped line never starts with a list marker."""
        config = FormatterConfig(line_width=8)
        once = format_and_render("aaaaaaaa - bb", config)
        assert once == "aaaaaaaa -\nbb\n"
        assert format_and_render(once, config) == once

    @pytest.mark.parametrize(
        "source",
        [
            "aaaaaaaa # bb",
            "aaaaaaaa 1. bb",
            "aaaaaaaa > bb",
            "aaaaaaaa === bb",
            "aaaaaaaa *** bb",
        ],
    )
    def test_reflow_idempotent_with_markers(self, source: str) -> None:
        """Block-opening tokens never land at the start of a wrapped line."""
        config = FormatterConfig(line_width=8)
        once = format_and_render(source, config)
        assert format_and_render(once, config) == once

    def test_nested_list_under_ordered_item(self, config: FormatterConfig) -> None:
        """Nested lists indent two spaces even under a numbered item."""
        source = "1. a\n   - b\n"
        assert format_and_render(source, config) == "1. a\n  - b\n"

    def test_sample_document(self, config: FormatterConfig, sample_markdown: str) -> None:
        """The sample document is normalized block by block."""
        assert format_and_render(sample_markdown, config) == (
            "# Title\n"
            "\n"
            "Some *emphasis* and _underscored_ text that goes on for quite a while so that it\n"
            "needs to be wrapped at the configured width.\n"
            "\n"
            "- one\n"
            "- two\n"
            "  - nested a\n"
            "  - nested b\n"
            "- three\n"
            "\n"
            "1. first\n"
            "2. second\n"
            "\n"
            "```python\n"
            "def f():\n"
            "    return 1\n"
            "```\n"
            "\n"
            "> quoted text\n"
            "\n"
            "    indented code\n"
        )


class TestFrontMatter:
    """Tests for front matter handling."""

    def test_split(self) -> None:
        """A leading YAML block is separated from the body."""
        front, body = split_front_matter("---\ntitle: x\n---\n# H\n")
        assert front == "---\ntitle: x\n---"
        assert body == "# H\n"

    def test_no_front_matter(self) -> None:
        """Text without front matter is returned unchanged."""
        assert split_front_matter("# H\n---\n") == ("", "# H\n---\n")

    def test_preserved(self, config: FormatterConfig) -> None:
        """Front matter is copied through verbatim."""
        source = "---\ntitle:   x\ntags: [a, b]\n---\n#   H\n"
        assert format_and_render(source, config) == "---\ntitle:   x\ntags: [a, b]\n---\n\n# H\n"

    def test_front_matter_only(self, config: FormatterConfig) -> None:
        """A document with only front matter keeps it."""
        assert format_and_render("---\na: 1\n---\n", config) == "---\na: 1\n---\n"


class TestHelpers:
    """Tests for decode_markdown and is_formatted."""

    def test_decode_str_passthrough(self) -> None:
        """Strings are returned as is."""
        assert decode_markdown("x") == "x"

    def test_decode_strips_bom(self) -> None:
        """The UTF-8 byte order mark is dropped."""
        assert decode_markdown(b"\xef\xbb\xbfx") == "x"

    def test_is_formatted(self, config: FormatterConfig) -> None:
        """Formatted input is reported as such."""
        assert is_formatted("# H\n\ntext\n", config)
        assert not is_formatted("#   H\n\ntext\n", config)
