"""Declarative tag definitions and the read-only tag dictionary.

A tag's behaviour during sifting is entirely described by the fields of its
``TagDefinition``; no per-tag code runs at parse time. Definitions are
immutable once built, so one dictionary can be shared by any number of
concurrent parses.
"""

import re
from dataclasses import dataclass, fields
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Pattern,
    Tuple,
    Union,
)

PatternLike = Union[str, Pattern[str]]


@dataclass(frozen=True)
class ParamToken:
    """A named parameter a tag accepts."""

    token: str
    optional: bool = False

    def __post_init__(self) -> None:
        """Validate parameter token."""
        if not self.token:
            raise ValueError("Parameter token cannot be empty")


def _compile(pattern: Optional[PatternLike]) -> Optional[Pattern[str]]:
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


def _tag_tuple(names: Optional[Iterable[str]]) -> Optional[Tuple[str, ...]]:
    if names is None:
        return None
    if isinstance(names, str):
        names = (names,)
    return tuple(name.lower() for name in names)


@dataclass(frozen=True)
class TagDefinition:
    """Grammar rules for a single tag.

    Attributes:
        only_in: Tags this tag may appear directly inside, ``None`` for anywhere
        only_allow: Tags allowed as direct children, ``None`` for no restriction
        self_closable: Tag is closed implicitly by the next tag of the same type
        require_between: Tag needs text between its opening and closing tags
        allow_quick_param: ``[tag=value]`` shorthand is accepted
        allow_between_as_param: Between text may serve as the first parameter
        quick_param_format: Pattern a quick parameter must match
        quick_param_format_description: Error template, ``%param%`` is replaced
        param_tokens: Declared named parameters
        multi_tag: Placeholder whose concrete tag is resolved from its content
        supported_tags: Candidate tags for a multi-tag placeholder
        url_matches: Patterns whose first group extracts an id from a URL
        url_param: Parameter the URL-id extraction applies to
        description: Free form description
    """

    only_in: Optional[Tuple[str, ...]] = None
    only_allow: Optional[Tuple[str, ...]] = None
    self_closable: bool = False
    require_between: bool = False
    allow_quick_param: bool = False
    allow_between_as_param: bool = False
    quick_param_format: Optional[Pattern[str]] = None
    quick_param_format_description: Optional[str] = None
    param_tokens: Optional[Tuple[ParamToken, ...]] = None
    multi_tag: bool = False
    supported_tags: Optional[Tuple[str, ...]] = None
    url_matches: Optional[Tuple[Pattern[str], ...]] = None
    url_param: str = "url"
    description: str = ""

    def __post_init__(self) -> None:
        """Normalize collections and compile patterns."""
        # frozen dataclass: normalization has to bypass __setattr__
        object.__setattr__(self, "only_in", _tag_tuple(self.only_in))
        object.__setattr__(self, "only_allow", _tag_tuple(self.only_allow))
        object.__setattr__(self, "supported_tags", _tag_tuple(self.supported_tags))
        object.__setattr__(
            self, "quick_param_format", _compile(self.quick_param_format)
        )

        if self.param_tokens is not None:
            tokens = tuple(
                token if isinstance(token, ParamToken) else ParamToken(**token)
                for token in self.param_tokens
            )
            object.__setattr__(self, "param_tokens", tokens)

        if self.url_matches is not None:
            object.__setattr__(
                self,
                "url_matches",
                tuple(_compile(pattern) for pattern in self.url_matches),
            )

        if self.multi_tag and not self.supported_tags:
            raise ValueError("A multi-tag definition must declare supported_tags")
        if self.allow_between_as_param and not self.param_tokens:
            raise ValueError(
                "allow_between_as_param requires at least one parameter token"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TagDefinition":
        """Create a definition from a plain mapping of field values.

        Unknown keys (for instance rendering templates kept next to the
        grammar rules) are ignored.
        """
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def has_param(self, name: str) -> bool:
        """Check whether ``name`` is one of the declared parameter tokens."""
        if self.param_tokens is None:
            return False
        return any(token.token == name for token in self.param_tokens)

    def extract_url_id(self, value: str) -> str:
        """Return the id captured by the first matching URL pattern.

        The first capture group of the first pattern that matches wins (the
        whole match for a pattern without groups). When nothing matches the
        value is returned unchanged, on the assumption it already is an id.
        """
        for pattern in self.url_matches or ():
            match = pattern.search(value)
            if match is None:
                continue
            extracted = match.group(1) if pattern.groups else match.group(0)
            return value if extracted is None else extracted
        return value

    def matches_url(self, text: str) -> bool:
        """Check if any URL pattern of this definition matches ``text``."""
        return any(pattern.search(text) for pattern in self.url_matches or ())

    @property
    def required_params(self) -> List[str]:
        """Names of the parameter tokens that are not optional."""
        if self.param_tokens is None:
            return []
        return [token.token for token in self.param_tokens if not token.optional]

    @property
    def first_param(self) -> Optional[str]:
        """Name of the first declared parameter token."""
        if not self.param_tokens:
            return None
        return self.param_tokens[0].token


class TagDictionary(Mapping[str, TagDefinition]):
    """Read-only mapping from lower-cased tag name to its definition."""

    def __init__(self, definitions: Optional[Mapping[str, TagDefinition]] = None) -> None:
        self._definitions: Dict[str, TagDefinition] = {
            name.lower(): definition
            for name, definition in (definitions or {}).items()
        }

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Union[TagDefinition, Mapping[str, Any]]]
    ) -> "TagDictionary":
        """Build a dictionary from definitions or plain field mappings."""
        definitions: Dict[str, TagDefinition] = {}
        for name, value in data.items():
            if isinstance(value, TagDefinition):
                definitions[name] = value
            else:
                definitions[name] = TagDefinition.from_dict(value)
        return cls(definitions)

    def __getitem__(self, name: str) -> TagDefinition:
        return self._definitions[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._definitions

    def lookup(self, name: Optional[str]) -> Optional[TagDefinition]:
        """Return the definition for ``name`` or ``None`` when unknown."""
        if name is None:
            return None
        return self._definitions.get(name.lower())

    @classmethod
    def coerce(cls, dictionary: "DictionaryLike") -> "TagDictionary":
        """Return ``dictionary`` itself, or wrap a plain mapping of definitions."""
        if isinstance(dictionary, TagDictionary):
            return dictionary
        return cls(dictionary)

    def missing_references(self) -> List[str]:
        """Describe tag names referenced by definitions but not defined."""
        problems = []
        for name, definition in self._definitions.items():
            for field_name in ("only_in", "only_allow", "supported_tags"):
                for referenced in getattr(definition, field_name) or ():
                    if referenced not in self._definitions:
                        problems.append(
                            f"[{name}] {field_name} references unknown tag [{referenced}]"
                        )
            if definition.multi_tag:
                for candidate in definition.supported_tags or ():
                    candidate_def = self._definitions.get(candidate)
                    if candidate_def is not None and not candidate_def.url_matches:
                        problems.append(
                            f"[{name}] supported tag [{candidate}] has no url_matches"
                        )
        return problems

    def __repr__(self) -> str:
        return f"TagDictionary({sorted(self._definitions)!r})"


DictionaryLike = Union[TagDictionary, Mapping[str, TagDefinition]]
