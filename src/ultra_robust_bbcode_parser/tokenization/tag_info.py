"""Token classification against the tag dictionary.

``TagInfo`` turns a raw token into everything the sifter needs to know about
it: what kind of token it is, which tag it names, the parsed parameters and
the tag's definition. Tags the dictionary does not know are classified as
plain text so that their bracket sequence survives verbatim.
"""

import re
from typing import Dict, List, Optional

from ultra_robust_bbcode_parser.definitions import TagDefinition, TagDictionary

from .tokenizer import RawToken, TokenKind

# key=value, key="value", key='value' and key=&quot;value&quot; (the form
# double quotes take once the input has been HTML-escaped)
PARAM_PATTERN = re.compile(
    r"""
    (?P<bare_key>\w+)=(?P<bare_value>[\w\#]+)
    | (?P<dq_key>\w+)="(?P<dq_value>[^"]+)"
    | (?P<sq_key>\w+)='(?P<sq_value>[^']+)'
    | (?P<eq_key>\w+)=&quot;(?P<eq_value>.+?)&quot;
    """,
    re.VERBOSE,
)

_PARAM_GROUPS = (
    ("bare_key", "bare_value"),
    ("dq_key", "dq_value"),
    ("sq_key", "sq_value"),
    ("eq_key", "eq_value"),
)


def parse_named_params(raw_params: str) -> Dict[str, str]:
    """Parse space separated ``key=value`` pairs; later keys win."""
    params: Dict[str, str] = {}
    for match in PARAM_PATTERN.finditer(raw_params):
        for key_group, value_group in _PARAM_GROUPS:
            if match.group(key_group) is not None:
                params[match.group(key_group)] = match.group(value_group)
                break
    return params


class TagInfo:
    """Classification record for a single token."""

    def __init__(self, raw: RawToken, dictionary: TagDictionary) -> None:
        """Classify ``raw`` using ``dictionary``.

        Args:
            raw: Token produced by the tokenizer
            dictionary: Tag dictionary used to resolve the tag name
        """
        self.raw = raw
        self.complete_match = raw.complete_match
        self.errors: List[str] = []
        self.params: Dict[str, str] = {}
        self.definition: Optional[TagDefinition] = None
        self.tag: Optional[str] = None
        self.is_tag = False
        self.closing = False
        self.text: Optional[str] = None
        self.invalid_quick_param: Optional[str] = None
        self.wrong_closing = False

        self._classify(dictionary)

    def _classify(self, dictionary: TagDictionary) -> None:
        if not self.raw.is_tag_shaped:
            self.text = self.raw.text
            return

        tag = self.raw.name.lower()
        definition = dictionary.lookup(tag)
        if definition is None:
            # Unknown tag: keep the bracket sequence as literal text
            self.text = self.complete_match
            return

        self.is_tag = True
        self.tag = tag
        self.closing = self.raw.closing
        self.definition = definition
        if not self.closing:
            self._parse_params(self.raw.params)

    def _parse_params(self, raw_params: str) -> None:
        if raw_params.startswith("=") and self.definition.allow_quick_param:
            self._parse_quick_param(raw_params[1:])
        elif raw_params[:1].isspace():
            self.params = parse_named_params(raw_params)

    def _parse_quick_param(self, quick_param: str) -> None:
        definition = self.definition
        if definition.quick_param_format is None:
            values = (quick_param,)
        else:
            match = definition.quick_param_format.search(quick_param)
            if match is None:
                self.invalid_quick_param = quick_param
                return
            values = match.groups() or (match.group(0),)

        for token, value in zip(definition.param_tokens or (), values):
            if value is not None:
                self.params[token.token] = value

    @property
    def kind(self) -> TokenKind:
        """Kind of this token."""
        if not self.is_tag:
            return TokenKind.TEXT
        if self.closing:
            return TokenKind.CLOSING_TAG
        return TokenKind.OPENING_TAG

    @property
    def element_is_opening_tag(self) -> bool:
        return self.kind is TokenKind.OPENING_TAG

    @property
    def element_is_closing_tag(self) -> bool:
        return self.kind is TokenKind.CLOSING_TAG

    @property
    def element_is_text(self) -> bool:
        return self.kind is TokenKind.TEXT

    @property
    def has_invalid_quick_param(self) -> bool:
        return self.invalid_quick_param is not None

    @property
    def only_allowed_in_parent_tags(self) -> bool:
        """Check if the tag is restricted to specific parent tags."""
        return self.definition is not None and self.definition.only_in is not None

    def allowed_in(self, parent_tag: Optional[str]) -> bool:
        """Check if the tag may appear directly inside ``parent_tag``."""
        if not self.only_allowed_in_parent_tags:
            return True
        return parent_tag in self.definition.only_in

    def handle_tag_as_text(self) -> None:
        """Reinterpret this tag token as its literal bracket text."""
        self.is_tag = False
        self.closing = False
        self.text = self.complete_match

    def __repr__(self) -> str:
        return f"TagInfo(kind={self.kind.name}, tag={self.tag!r}, match={self.complete_match!r})"
