"""Tests for the BBCode tokenizer."""

import pytest

from ultra_robust_bbcode_parser.tokenization import (
    BBCodeTokenizer,
    RawToken,
    TokenStream,
    escape_html,
)


def _matches(text: str):
    return [token.complete_match for token in TokenStream(text)]


class TestEscapeHtml:
    """Test HTML pre-escaping."""

    def test_escapes_three_characters(self) -> None:
        """Test that only <, > and double quotes are escaped."""
        assert escape_html('<a href="x">&\'</a>') == (
            "&lt;a href=&quot;x&quot;&gt;&'&lt;/a&gt;"
        )

    def test_plain_text_unchanged(self) -> None:
        """Test text without special characters."""
        assert escape_html("plain [b]text[/b]") == "plain [b]text[/b]"


class TestTokenStream:
    """Test token shapes produced by the token pattern."""

    def test_splits_tags_and_text(self) -> None:
        """Test basic token boundaries."""
        assert _matches("[b]bold[/b] and [i]it[/i]") == [
            "[b]", "bold", "[/b]", " and ", "[i]", "it", "[/i]",
        ]

    def test_tag_token_fields(self) -> None:
        """Test captured pieces of tag-shaped tokens."""
        opening, text, closing = list(TokenStream("[url=http://x.org]x[/URL]"))

        assert opening.name == "url"
        assert opening.params == "=http://x.org"
        assert opening.closing is False
        assert opening.offset == 0
        assert text.text == "x"
        assert not text.is_tag_shaped
        assert closing.name == "URL"
        assert closing.closing is True
        assert text.offset == 18
        assert closing.offset == 19

    def test_named_params_are_captured(self) -> None:
        """Test space separated key=value parameters."""
        (token,) = [t for t in TokenStream("[img width=10 height=20]") if t.is_tag_shaped]

        assert token.params == " width=10 height=20"

    def test_star_tag_name(self) -> None:
        """Test the list item tag name."""
        assert [t.name for t in TokenStream("[*]a[*]b")] == ["*", None, "*", None]

    def test_unknown_tags_are_still_tag_shaped(self) -> None:
        """Test the tokenizer does no semantic validation."""
        (token,) = list(TokenStream("[nosuchtag]"))

        assert token.is_tag_shaped
        assert token.name == "nosuchtag"

    def test_stray_brackets_are_kept_as_text(self) -> None:
        """Test that no input character is dropped."""
        text = "a [ b [[c] d ["

        tokens = list(TokenStream(text))

        assert "".join(t.complete_match for t in tokens) == text
        assert all(t.complete_match for t in tokens)

    def test_stray_bracket_starts_text_run(self) -> None:
        """Test a bracket that cannot open a tag leads the following text."""
        assert _matches("a[b") == ["a", "[b"]
        assert _matches("[[b]") == ["[", "[b]"]

    def test_no_character_is_lost(self) -> None:
        """Test the concatenation of tokens reproduces the input."""
        text = "[quote name=x]hi [b]there[/b][/quote] [url=/a]b[/url] ]["

        assert "".join(_matches(text)) == text

    def test_stream_is_restartable(self) -> None:
        """Test that iterating twice yields the same tokens."""
        stream = TokenStream("[b]x[/b]")

        assert list(stream) == list(stream)

    def test_empty_input_yields_nothing(self) -> None:
        """Test empty text."""
        assert list(TokenStream("")) == []


class TestRawToken:
    """Test RawToken validation."""

    def test_empty_token_raises_error(self) -> None:
        """Test that tokens are never empty."""
        with pytest.raises(ValueError, match="Token cannot be empty"):
            RawToken(complete_match="", offset=0)

    def test_negative_offset_raises_error(self) -> None:
        """Test offset validation."""
        with pytest.raises(ValueError, match="Offset must be >= 0"):
            RawToken(complete_match="x", offset=-1)


class TestBBCodeTokenizer:
    """Test the tokenizer facade."""

    def test_tokenize_escapes_by_default(self) -> None:
        """Test HTML escaping before scanning."""
        result = BBCodeTokenizer().tokenize("<b>[b]x[/b]")

        assert result.tokens[0].complete_match == "&lt;b&gt;"
        assert result.escaped is True
        assert result.source_length == len("<b>[b]x[/b]")

    def test_tokenize_without_escaping(self) -> None:
        """Test disabled escaping."""
        result = BBCodeTokenizer(escape_html=False).tokenize("<b>")

        assert result.tokens[0].complete_match == "<b>"
        assert result.escaped is False

    def test_shape_distribution(self) -> None:
        """Test per-shape counts."""
        result = BBCodeTokenizer().tokenize("[b]x[/b][i]y")

        assert result.token_count == 5
        assert result.shape_distribution == {
            "opening_tag": 2,
            "text": 2,
            "closing_tag": 1,
        }
