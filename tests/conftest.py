"""Shared fixtures for the BBCode parser test suite."""

import pytest

from ultra_robust_bbcode_parser.definitions import ParamToken, TagDefinition, TagDictionary

URL_FORMAT = r"^((?:(?:https?|ftp)://|/).+)$"
SIZE_FORMAT = r"^(\d+)x(\d+)$"

YOUTUBE_MATCHES = [
    r"youtube\.com.*[v]=([^&]*)",
    r"youtu\.be/([^&]*)",
    r"y2u\.be/([^&]*)",
]
VIMEO_MATCHES = [r"vimeo\.com/(\d+)"]


def build_sample_dictionary() -> TagDictionary:
    """Dictionary with one tag per grammar feature."""
    return TagDictionary.from_mapping({
        "b": TagDefinition(description="Make text bold"),
        "i": TagDefinition(description="Make text italic"),
        "url": TagDefinition(
            require_between=True,
            allow_quick_param=True,
            allow_between_as_param=True,
            quick_param_format=URL_FORMAT,
            quick_param_format_description=(
                "The URL should start with http:// https://, ftp:// or /, "
                "instead of '%param%'"
            ),
            param_tokens=[ParamToken("url")],
            description="Link to another page",
        ),
        "img": TagDefinition(
            require_between=True,
            allow_quick_param=True,
            quick_param_format=SIZE_FORMAT,
            quick_param_format_description=(
                "The image size format is WIDTHxHEIGHT, where WIDTH and HEIGHT "
                "are numbers, not '%param%'"
            ),
            param_tokens=[
                ParamToken("width", optional=True),
                ParamToken("height", optional=True),
            ],
            description="Image",
        ),
        "list": TagDefinition(only_allow=["*"], description="Unordered list"),
        "*": TagDefinition(
            only_in=["list"],
            self_closable=True,
            description="List item",
        ),
        "quote": TagDefinition(
            allow_quick_param=True,
            param_tokens=[{"token": "name", "optional": True}],
            description="Quote another person",
        ),
        "hr": TagDefinition(self_closable=True, description="Horizontal rule"),
        "youtube": TagDefinition(
            require_between=True,
            allow_quick_param=True,
            quick_param_format=SIZE_FORMAT,
            param_tokens=[
                ParamToken("width", optional=True),
                ParamToken("height", optional=True),
            ],
            url_matches=YOUTUBE_MATCHES,
            description="YouTube video",
        ),
        "vimeo": TagDefinition(
            require_between=True,
            url_matches=VIMEO_MATCHES,
            description="Vimeo video",
        ),
        "media": TagDefinition(
            multi_tag=True,
            require_between=True,
            supported_tags=["youtube", "vimeo"],
            description="Video from a supported site",
        ),
    })


@pytest.fixture
def dictionary() -> TagDictionary:
    """Sample tag dictionary used across the suite."""
    return build_sample_dictionary()
