"""Tests for the append-only error log."""

from ultra_robust_bbcode_parser.tree import ErrorCategory, ErrorLog, SiftError, TextNode


class TestErrorLog:
    """Test the single-writer error log and its views."""

    def setup_method(self) -> None:
        """Create an empty log."""
        self.log = ErrorLog()

    def test_empty_log(self) -> None:
        """Test an empty log is falsy."""
        assert not self.log
        assert len(self.log) == 0
        assert self.log.messages == []

    def test_record_writes_global_and_node_views(self) -> None:
        """Test one record feeds both views."""
        node = TextNode("x")

        entry = self.log.record("bad", ErrorCategory.STRUCTURAL, node, tag="b")

        assert entry == SiftError("bad", ErrorCategory.STRUCTURAL, "b")
        assert self.log.messages == ["bad"]
        assert node.errors == ["bad"]
        assert self.log.entries_for(node) == [entry]

    def test_record_without_target(self) -> None:
        """Test global-only errors."""
        self.log.record("too deep", ErrorCategory.RESOURCE)

        assert self.log.messages == ["too deep"]
        assert self.log.by_category(ErrorCategory.RESOURCE)[0].message == "too deep"

    def test_entries_for_unknown_target(self) -> None:
        """Test nodes without errors have no entries."""
        self.log.record("bad", ErrorCategory.PARAMETER, TextNode("a"))

        assert self.log.entries_for(TextNode("b")) == []

    def test_shared_error_list_links_token_and_node(self) -> None:
        """Test a node built from a token's error list sees its entries."""
        errors = []
        token_like = TextNode("[/b]", errors=errors)
        self.log.record("no match", ErrorCategory.STRUCTURAL, token_like)

        node = TextNode("[/b]", errors=errors)

        assert [e.message for e in self.log.entries_for(node)] == ["no match"]

    def test_order_is_preserved(self) -> None:
        """Test messages keep recording order and allow duplicates."""
        for message in ("a", "b", "a"):
            self.log.record(message, ErrorCategory.STRUCTURAL)

        assert self.log.messages == ["a", "b", "a"]
        assert len(self.log.entries) == 3
