"""Per-token validation rules for the tag sifter.

Each token is checked against the tree state before it is added to the
tree. The rules run in a fixed order and the first failing rule ends the
check for that token; the token is still built afterwards, carrying the
error, unless a closing tag turned out to close nothing.
"""

from typing import Iterable, Optional

from ultra_robust_bbcode_parser.tokenization import TagInfo

from .builder import BBTree
from .errors import ErrorCategory, ErrorLog, ErrorTarget
from .nodes import TagNode, TextNode
from .transitions import closing_transition, self_closing_tag_reached_a_closer

DEFAULT_QUICK_PARAM_DESCRIPTION = "The parameter '%param%' has an invalid format"


def to_sentence(tags: Iterable[str]) -> str:
    """Join tag names for use inside brackets: ``a], [b] and [c``."""
    names = list(tags)
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return "], [".join(names[:-1]) + "] and [" + names[-1]


def quick_param_error(description: Optional[str], value: str) -> str:
    """Fill the ``%param%`` placeholder of a format description."""
    return (description or DEFAULT_QUICK_PARAM_DESCRIPTION).replace("%param%", value)


class ElementValidator:
    """Runs the validation rules for one token at a time."""

    def __init__(self, bbtree: BBTree, error_log: ErrorLog) -> None:
        self.bbtree = bbtree
        self.error_log = error_log

    # Rule chain

    def validate(self, ti: TagInfo) -> bool:
        """Validate ``ti`` against the current tree state.

        Returns:
            True when every applicable rule passed
        """
        if ti.element_is_text or ti.element_is_opening_tag:
            if not self._valid_opening_tag(ti):
                return False
            if not self._valid_constraints_on_child(ti):
                return False
        if not self._valid_closing_element(ti):
            return False
        return self._valid_param_supplied_as_text(ti)

    def _valid_opening_tag(self, ti: TagInfo) -> bool:
        if not ti.element_is_opening_tag:
            return True
        parent = self.bbtree.parent_tag

        if (
            ti.only_allowed_in_parent_tags
            and (parent is None or not ti.allowed_in(parent.tag))
            and not self_closing_tag_reached_a_closer(self.bbtree.current_node, ti)
        ):
            message = (
                f"[{ti.tag}] can only be used in "
                f"[{to_sentence(ti.definition.only_in)}]"
            )
            if parent is not None:
                message += f", so using it in a [{parent.tag}] tag is not allowed"
            self._add_error(message, ErrorCategory.STRUCTURAL, ti)
            return False

        if ti.has_invalid_quick_param:
            self._add_error(
                quick_param_error(
                    ti.definition.quick_param_format_description,
                    ti.invalid_quick_param,
                ),
                ErrorCategory.PARAMETER,
                ti,
            )
            return False

        # allow_between_as_param tags get their parameter checked as text later
        definition = ti.definition
        if definition.param_tokens is not None and not definition.allow_between_as_param:
            for token in definition.required_params:
                if token not in ti.params:
                    self._add_error(
                        f"Tag [{ti.tag}] must have '{token}' parameter",
                        ErrorCategory.PARAMETER,
                        ti,
                    )
            for token in ti.params:
                if not definition.has_param(token):
                    self._add_error(
                        f"Tag [{ti.tag}] doesn't have a '{token}' parameter",
                        ErrorCategory.PARAMETER,
                        ti,
                    )
        return True

    def _valid_constraints_on_child(self, ti: TagInfo) -> bool:
        if not self.bbtree.parent_has_constraints_on_children:
            return True

        parent = self.bbtree.parent_tag
        parent_def = parent.definition
        allowed_tags = parent_def.only_allow
        if ti.is_tag:
            rejected = ti.tag not in allowed_tags
        else:
            rejected = not parent_def.require_between and ti.text.lstrip() != ""

        if rejected:
            offender = f"[{ti.tag}]" if ti.is_tag else f'"{ti.text}"'
            # an unknown tag reaches this rule as text
            category = (
                ErrorCategory.LEXICAL
                if ti.raw.is_tag_shaped and not ti.is_tag
                else ErrorCategory.STRUCTURAL
            )
            self._add_error(
                f"[{parent.tag}] can only contain [{to_sentence(allowed_tags)}] "
                f"tags, so {offender} is not allowed",
                category,
                ti,
            )
            return False
        return True

    def _valid_closing_element(self, ti: TagInfo) -> bool:
        if not ti.element_is_closing_tag:
            return True

        transition = closing_transition(self.bbtree.tags_list, ti)
        if transition.is_wrong_closing:
            parent = self.bbtree.parent_tag
            if parent is None:
                message = f"Closing tag [/{ti.tag}] doesn't match an opening tag"
            else:
                message = f"Closing tag [/{ti.tag}] doesn't match [{parent.tag}]"
            self._add_error(message, ErrorCategory.STRUCTURAL, ti)
            ti.wrong_closing = True
            return False

        current = self.bbtree.current_node
        if (
            current.definition.require_between
            and current.between is None
            and not current.children
        ):
            message = f"No text between [{ti.tag}] and [/{ti.tag}] tags."
            if current.is_unresolved_multi_tag:
                message = f"Cannot determine multi-tag type: {message}"
            self._add_error(message, ErrorCategory.PARAMETER, current)
            return False
        return True

    def _valid_param_supplied_as_text(self, ti: TagInfo) -> bool:
        current = self.bbtree.current_node
        if current is None or not self.use_text_as_parameter():
            return True

        if ti.element_is_opening_tag and not isinstance(current.first_child, TextNode):
            self._add_error(
                "between parameter must be plain text", ErrorCategory.PARAMETER, ti
            )
            return False

        definition = current.definition
        if (
            ti.element_is_text
            and definition.require_between
            and definition.quick_param_format is not None
        ):
            between = definition.extract_url_id(ti.text)
            if definition.quick_param_format.search(between) is None:
                self._add_error(
                    quick_param_error(
                        definition.quick_param_format_description, ti.text
                    ),
                    ErrorCategory.PARAMETER,
                    ti,
                )
                return False
        return True

    # Shared queries

    def use_text_as_parameter(self) -> bool:
        """Check if text inside the current tag may become its first parameter."""
        current = self.bbtree.current_node
        return (
            current is not None
            and current.definition.allow_between_as_param
            and current.params_not_set
            and not current.has_invalid_quick_param
        )

    def _add_error(
        self, message: str, category: ErrorCategory, target: ErrorTarget
    ) -> None:
        tag = target.tag if isinstance(target, (TagInfo, TagNode)) else None
        self.error_log.record(message, category, target, tag=tag)
