"""Parse driver for ultra-robust BBCode parsing.

``TagSifter`` walks the token stream once, classifies and validates every
token, and grows the ``BBTree``. Markup errors never stop the walk: they are
recorded and the sifter always reaches the end of the input with a tree.
"""

from typing import Dict, List, Optional

from ultra_robust_bbcode_parser.definitions import DictionaryLike, TagDictionary
from ultra_robust_bbcode_parser.shared import TreeConfig, get_logger
from ultra_robust_bbcode_parser.tokenization import (
    BBCodeTokenizer,
    TagInfo,
    TokenKind,
    TokenStream,
)

from .builder import BBTree
from .errors import ErrorCategory, ErrorLog
from .nodes import NodeCollection, TagNode, TextNode
from .result import ParseResult
from .transitions import (
    ClosingTransition,
    OpeningTransition,
    closing_transition,
    opening_transition,
)
from .validation import ElementValidator


def stack_level_error(max_root_nodes: int) -> str:
    return (
        "Stack level would go too deep. You must be trying to process a text "
        f"containing thousands of nodes at once (limit is {max_root_nodes} "
        "root nodes). Rendering such a tree recursively could exhaust the stack."
    )


class TagSifter:
    """Builds a validated ``BBTree`` from markup text.

    Examples:
        >>> sifter = TagSifter("[b]bold[/b]", dictionary)
        >>> sifter.process_text()
        >>> sifter.valid
        True
    """

    def __init__(
        self,
        text: str,
        dictionary: DictionaryLike,
        escape_html: bool = True,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the sifter.

        Args:
            text: Markup to sift
            dictionary: Tag dictionary, read only during the sift
            escape_html: Escape ``<``, ``>`` and ``"`` before tokenizing
            config: Tree building configuration
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tag_sifter")
        self.config = config or TreeConfig()

        self.tokenizer = BBCodeTokenizer(escape_html, correlation_id)
        self.text = self.tokenizer.prepare(text)
        self.dictionary = TagDictionary.coerce(dictionary)

        self.bbtree = BBTree(
            trim_self_closing_newlines=self.config.trim_self_closing_newlines,
            correlation_id=correlation_id,
        )
        self.error_log = ErrorLog(self.logger.child("error_log"))
        self.validator = ElementValidator(self.bbtree, self.error_log)

        self.tokens_processed = 0
        self.nodes_created = 0
        self.aborted = False
        self._processed = False

    @property
    def errors(self) -> List[str]:
        """Every error message recorded so far, in order."""
        return self.error_log.messages

    @property
    def valid(self) -> bool:
        return not self.error_log

    def process_text(self) -> NodeCollection:
        """Sift the whole text into the tree.

        Returns:
            The root node collection

        Raises:
            RuntimeError: If called a second time on the same sifter
        """
        if self._processed:
            raise RuntimeError("process_text() may only be called once per TagSifter")
        self._processed = True

        self.logger.info(
            "Starting tag sifting",
            extra={"content_length": len(self.text), "tag_count": len(self.dictionary)}
        )

        for raw in TokenStream(self.text):
            ti = TagInfo(raw, self.dictionary)
            self.tokens_processed += 1

            self.validator.validate(ti)

            kind = ti.kind
            if kind is TokenKind.OPENING_TAG:
                self._handle_opening_tag(ti)
            elif kind is TokenKind.TEXT:
                self._handle_text(ti)
            else:
                self._handle_closing_tag(ti)

            if self.config.abort_on_node_limit and self._over_node_limit():
                self.aborted = True
                self._throw_stack_level_will_be_too_deep_error()
                self.logger.warning(
                    "Sifting stopped at node limit",
                    extra={"tokens_processed": self.tokens_processed}
                )
                break

        self._validate_all_tags_closed_off()
        if not self.aborted and self._over_node_limit():
            self._throw_stack_level_will_be_too_deep_error()

        self.logger.info(
            "Tag sifting completed",
            extra={
                "tokens_processed": self.tokens_processed,
                "nodes_created": self.nodes_created,
                "error_count": len(self.error_log),
            }
        )
        return self.bbtree.nodes

    def to_result(self) -> ParseResult:
        """Package the sifted tree and errors into a ``ParseResult``."""
        result = ParseResult(
            nodes=self.bbtree.nodes,
            errors=self.error_log.messages,
            error_log=self.error_log,
            unclosed_tags=list(self.bbtree.tags_list),
            aborted=self.aborted,
            correlation_id=self.correlation_id,
        )
        result.performance.tokens_generated = self.tokens_processed
        result.performance.nodes_created = self.nodes_created
        result.performance.errors_recorded = len(self.error_log)
        result.add_sift_diagnostics()
        return result

    # Token handlers

    def _handle_opening_tag(self, ti: TagInfo) -> None:
        node = TagNode(
            tag=ti.tag,
            definition=ti.definition,
            params=self._get_formatted_element_params(ti),
            errors=ti.errors,
            invalid_quick_param=ti.invalid_quick_param,
        )

        transition = opening_transition(self.bbtree.current_node, ti)
        if transition is OpeningTransition.AUTO_CLOSE_THEN_OPEN:
            self.bbtree.retrogress()

        self.bbtree.build_up_new_tag(node)
        self.bbtree.escalate(node)
        self.nodes_created += 1

    def _handle_text(self, ti: TagInfo) -> None:
        current = self.bbtree.current_node
        if current is not None and current.is_unresolved_multi_tag:
            self._set_multi_tag_to_actual_tag(current, ti)

        if current is not None and current.definition.require_between:
            if self._store_between(current, ti):
                return

        self._create_text_element(ti)

    def _handle_closing_tag(self, ti: TagInfo) -> None:
        if ti.wrong_closing:
            ti.handle_tag_as_text()
            self._create_text_element(ti)
            return

        transition = closing_transition(self.bbtree.tags_list, ti)
        if transition is ClosingTransition.AUTO_CLOSE_THEN_CLOSE:
            self.bbtree.retrogress()
        self.bbtree.retrogress()

    def _store_between(self, current: TagNode, ti: TagInfo) -> bool:
        """Keep ``ti`` as the between text of ``current``.

        Returns:
            True if the text was consumed, False if it must also become a
            text node
        """
        definition = current.definition
        between = definition.extract_url_id(ti.text)
        current.between = between

        if not self.validator.use_text_as_parameter():
            return True

        if (
            definition.quick_param_format is not None
            and definition.quick_param_format.search(between) is None
        ):
            # The text stays once, as a text node carrying the format error
            current.between = ""
            return False

        current.params[definition.first_param] = between
        return True

    def _create_text_element(self, ti: TagInfo) -> None:
        self.bbtree.build_up_new_tag(TextNode(text=ti.text, errors=ti.errors))
        self.nodes_created += 1

    # Multi-tag resolution

    def _set_multi_tag_to_actual_tag(self, node: TagNode, ti: TagInfo) -> None:
        tag = self._get_actual_tag(node, ti.text)
        if tag is None:
            self.error_log.record(
                f"Unknown multi-tag type for [{node.tag}]",
                ErrorCategory.RESOLUTION,
                node,
                tag=node.tag,
            )
            return

        self.logger.debug(
            "Multi-tag resolved",
            extra={"placeholder": node.tag, "resolved_tag": tag}
        )
        node.resolve_to(tag, self.dictionary[tag])

    def _get_actual_tag(self, node: TagNode, text: str) -> Optional[str]:
        """First supported tag whose URL patterns match ``text``."""
        for tag in node.definition.supported_tags:
            definition = self.dictionary.lookup(tag)
            if definition is not None and definition.matches_url(text):
                return tag
        return None

    # Parameter formatting

    def _get_formatted_element_params(self, ti: TagInfo) -> Dict[str, str]:
        params = ti.params
        definition = ti.definition
        if definition.url_matches and definition.url_param in params:
            params[definition.url_param] = definition.extract_url_id(
                params[definition.url_param]
            )
        return params

    # End of input

    def _validate_all_tags_closed_off(self) -> None:
        for tag in self.bbtree.tags_list:
            self.error_log.record(
                f"[{tag.tag}] not closed", ErrorCategory.STRUCTURAL, tag, tag=tag.tag
            )
            tag.closed = False

    def _over_node_limit(self) -> bool:
        return len(self.bbtree.nodes) > self.config.max_root_nodes

    def _throw_stack_level_will_be_too_deep_error(self) -> None:
        self.error_log.record(
            stack_level_error(self.config.max_root_nodes), ErrorCategory.RESOURCE
        )
