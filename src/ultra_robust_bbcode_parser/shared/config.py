"""Configuration classes for ultra-robust BBCode parsing.

This module provides configuration objects for the tokenization, tree
building and API layers. ``ParserConfig`` is frozen so a single instance can
be shared between parsers running on different threads.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

# Root node ceiling above which recursive renderers risk exhausting the stack
DEFAULT_MAX_ROOT_NODES = 2200

_VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_COMPONENTS = ["tokenization", "tree", "global_"]


@dataclass
class TokenizationConfig:
    """Configuration for the tokenization layer."""

    escape_html: bool = True


@dataclass
class TreeConfig:
    """Configuration for tree building and the resource guard."""

    max_root_nodes: int = DEFAULT_MAX_ROOT_NODES
    abort_on_node_limit: bool = False
    trim_self_closing_newlines: bool = True

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if self.max_root_nodes <= 0:
            raise ValueError("max_root_nodes must be > 0")


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    # DEBUG, INFO, WARNING, ERROR, CRITICAL; None leaves the package logger alone
    logging_level: Optional[str] = None
    enable_correlation_tracking: bool = True
    enable_performance_metrics: bool = True
    max_input_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level is not None and self.logging_level not in _VALID_LOG_LEVELS:
            raise ValueError(f"logging_level must be one of {_VALID_LOG_LEVELS}")
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ValueError("max_input_size_bytes must be > 0 or None")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for all BBCode parser components.

    Thread-safe due to frozen dataclass implementation; use ``override`` to
    derive a modified copy.
    """

    tokenization: TokenizationConfig = field(default_factory=TokenizationConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.tree.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; ``component__field`` addresses a
                field of a nested component configuration

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig()
            >>> new_config = config.override(
            ...     tokenization__escape_html=False,
            ...     tree__max_root_nodes=500
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                # "global___field" belongs to the "global_" component
                component, field_name = key.rsplit("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"Use one of {_COMPONENTS}"],
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for component in _COMPONENTS:
            current_config = getattr(self, component)
            if component in nested_overrides:
                try:
                    new_fields[component] = replace(
                        current_config, **nested_overrides[component]
                    )
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=component) from e
            else:
                new_fields[component] = current_config

        for key, value in nested_overrides.items():
            if key not in _COMPONENTS:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {
            "tokenization": dict(vars(self.tokenization)),
            "tree": dict(vars(self.tree)),
            "global_": dict(vars(self.global_)),
            "name": self.name,
            "description": self.description,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys inside a component raise ``ConfigValidationError``.
        """
        try:
            return cls(
                tokenization=TokenizationConfig(**data.get("tokenization", {})),
                tree=TreeConfig(**data.get("tree", {})),
                global_=GlobalConfig(**data.get("global_", {})),
                name=data.get("name"),
                description=data.get("description"),
            )
        except (TypeError, ValueError) as e:
            if isinstance(e, ConfigValidationError):
                raise
            raise ConfigValidationError(f"Invalid configuration data: {e}") from e

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Create the default configuration for untrusted user markup."""
        return cls(name="default")

    @classmethod
    def trusted_markup(cls) -> "ParserConfig":
        """Create preset for markup whose embedded HTML is already safe."""
        return cls(
            tokenization=TokenizationConfig(escape_html=False),
            name="trusted_markup",
            description="Skips HTML pre-escaping for trusted input",
        )

    @classmethod
    def strict_resources(cls) -> "ParserConfig":
        """Create preset that stops early on oversized documents."""
        return cls(
            tree=TreeConfig(abort_on_node_limit=True),
            global_=GlobalConfig(max_input_size_bytes=1024 * 1024),
            name="strict_resources",
            description=(
                "Stops sifting as soon as the root node limit is exceeded and "
                "rejects input larger than 1 MiB"
            ),
        )
