"""Tests for tree nodes and the BBTree assembler."""

import pytest

from ultra_robust_bbcode_parser.definitions import TagDefinition
from ultra_robust_bbcode_parser.tree import BBTree, NodeCollection, TagNode, TextNode

PLAIN = TagDefinition()
SELF_CLOSING = TagDefinition(self_closable=True)
RESTRICTED = TagDefinition(only_allow=["*"])
MEDIA = TagDefinition(multi_tag=True, require_between=True, supported_tags=["vimeo"])
VIMEO = TagDefinition(require_between=True, url_matches=[r"vimeo\.com/(\d+)"])


class TestNodes:
    """Test TagNode and TextNode behaviour."""

    def test_tag_node_defaults(self) -> None:
        """Test a freshly built tag node."""
        node = TagNode(tag="b", definition=PLAIN)

        assert node.is_tag
        assert node.params_not_set
        assert node.between is None
        assert node.closed is True
        assert node.first_child is None
        assert not node.has_invalid_quick_param
        assert not node.is_unresolved_multi_tag

    def test_empty_tag_name_raises_error(self) -> None:
        """Test tag name validation."""
        with pytest.raises(ValueError, match="Tag node name cannot be empty"):
            TagNode(tag="", definition=PLAIN)

    def test_text_node(self) -> None:
        """Test text node basics."""
        node = TextNode("hello")

        assert not node.is_tag
        assert node.to_dict() == {"is_tag": False, "text": "hello"}

    def test_nodes_compare_by_identity(self) -> None:
        """Test equal-looking nodes remain distinct."""
        assert TextNode("x") != TextNode("x")

    def test_resolve_multi_tag(self) -> None:
        """Test a placeholder is resolved exactly once."""
        node = TagNode(tag="media", definition=MEDIA)
        assert node.is_unresolved_multi_tag

        node.resolve_to("vimeo", VIMEO)

        assert node.tag == "vimeo"
        assert node.definition is VIMEO
        assert not node.is_unresolved_multi_tag
        with pytest.raises(ValueError, match="not an unresolved multi-tag"):
            node.resolve_to("vimeo", VIMEO)

    def test_to_dict(self) -> None:
        """Test nested dictionary conversion."""
        node = TagNode(tag="url", definition=PLAIN, params={"url": "/a"}, between="/a")
        node.children.append(TextNode("x", errors=["bad"]))

        assert node.to_dict() == {
            "is_tag": True,
            "tag": "url",
            "params": {"url": "/a"},
            "closed": True,
            "between": "/a",
            "children": [{"is_tag": False, "text": "x", "errors": ["bad"]}],
        }


class TestNodeCollection:
    """Test the sibling container."""

    def setup_method(self) -> None:
        """Build b(i("x"), "y"), "z"."""
        self.outer = TagNode(tag="b", definition=PLAIN)
        self.inner = TagNode(tag="i", definition=PLAIN)
        self.inner.children.append(TextNode("x"))
        self.outer.children.extend([self.inner, TextNode("y")])
        self.nodes = NodeCollection([self.outer, TextNode("z")])

    def test_walk_is_depth_first(self) -> None:
        """Test document order traversal."""
        walked = [n.tag if n.is_tag else n.text for n in self.nodes.walk()]

        assert walked == ["b", "i", "x", "y", "z"]

    def test_node_count_includes_descendants(self) -> None:
        """Test total node count."""
        assert self.nodes.node_count() == 5
        assert len(self.nodes) == 2

    def test_find_all(self) -> None:
        """Test finding tags by name."""
        assert self.nodes.find_all("i") == [self.inner]
        assert self.nodes.find_all("u") == []

    def test_to_dicts(self) -> None:
        """Test conversion of every root node."""
        assert [d["is_tag"] for d in self.nodes.to_dicts()] == [True, False]


class TestBBTree:
    """Test stack and cursor operations."""

    def setup_method(self) -> None:
        """Create an empty tree."""
        self.tree = BBTree()

    def test_initial_state(self) -> None:
        """Test an empty tree is at the root."""
        assert not self.tree.within_open_tag
        assert not self.tree.expecting_a_closing_tag
        assert self.tree.parent_tag is None
        assert self.tree.current_node is None
        assert self.tree.current_children is self.tree.nodes
        assert self.tree.depth == 0

    def test_build_up_and_escalate(self) -> None:
        """Test opening a tag moves the cursor into it."""
        node = TagNode(tag="b", definition=PLAIN)

        self.tree.build_up_new_tag(node)
        self.tree.escalate(node)
        self.tree.build_up_new_tag(TextNode("bold"))

        assert self.tree.nodes == [node]
        assert self.tree.parent_tag is node
        assert self.tree.within_open_tag
        assert node.children[0].text == "bold"

    def test_retrogress_returns_to_parent(self) -> None:
        """Test closing the innermost tag."""
        outer = TagNode(tag="b", definition=PLAIN)
        inner = TagNode(tag="i", definition=PLAIN)
        for node in (outer, inner):
            self.tree.build_up_new_tag(node)
            self.tree.escalate(node)

        closed = self.tree.retrogress()

        assert closed is inner
        assert self.tree.current_node is outer
        assert self.tree.retrogress() is outer
        assert self.tree.current_node is None

    def test_retrogress_on_empty_stack_is_noop(self) -> None:
        """Test retrogress with nothing open."""
        assert self.tree.retrogress() is None
        assert self.tree.current_node is None

    def test_parent_constraints(self) -> None:
        """Test detection of child restrictions."""
        node = TagNode(tag="list", definition=RESTRICTED)
        self.tree.build_up_new_tag(node)
        self.tree.escalate(node)

        assert self.tree.parent_has_constraints_on_children

    def test_self_closable_retrogress_trims_newlines(self) -> None:
        """Test one trailing newline is removed from own and parent first text."""
        parent = TagNode(tag="list", definition=RESTRICTED)
        item = TagNode(tag="*", definition=SELF_CLOSING)
        self.tree.build_up_new_tag(parent)
        self.tree.escalate(parent)
        self.tree.build_up_new_tag(TextNode("\n"))
        self.tree.build_up_new_tag(item)
        self.tree.escalate(item)
        self.tree.build_up_new_tag(TextNode("one\r\n\n"))

        self.tree.retrogress()

        assert item.children[0].text == "one\r\n"
        assert parent.children[0].text == ""

    def test_newline_trimming_can_be_disabled(self) -> None:
        """Test trim_self_closing_newlines=False keeps text intact."""
        tree = BBTree(trim_self_closing_newlines=False)
        item = TagNode(tag="hr", definition=SELF_CLOSING)
        tree.build_up_new_tag(item)
        tree.escalate(item)
        tree.build_up_new_tag(TextNode("x\n"))

        tree.retrogress()

        assert item.children[0].text == "x\n"

    def test_plain_retrogress_keeps_newlines(self) -> None:
        """Test non self-closable tags are not trimmed."""
        node = TagNode(tag="b", definition=PLAIN)
        self.tree.build_up_new_tag(node)
        self.tree.escalate(node)
        self.tree.build_up_new_tag(TextNode("x\n"))

        self.tree.retrogress()

        assert node.children[0].text == "x\n"
