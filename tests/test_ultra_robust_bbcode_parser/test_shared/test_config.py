"""Comprehensive tests for configuration system."""

import json

import pytest

from ultra_robust_bbcode_parser.shared.config import (
    DEFAULT_MAX_ROOT_NODES,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    TokenizationConfig,
    TreeConfig,
)


class TestComponentConfigs:
    """Test suite for the component configuration dataclasses."""

    def test_default_values(self):
        """Test default component configuration values."""
        assert TokenizationConfig().escape_html is True

        tree = TreeConfig()
        assert tree.max_root_nodes == DEFAULT_MAX_ROOT_NODES == 2200
        assert tree.abort_on_node_limit is False
        assert tree.trim_self_closing_newlines is True

        global_config = GlobalConfig()
        assert global_config.logging_level is None
        assert global_config.enable_correlation_tracking is True
        assert global_config.enable_performance_metrics is True
        assert global_config.max_input_size_bytes is None

    def test_tree_config_rejects_non_positive_limit(self):
        """Test that the root node ceiling must be positive."""
        with pytest.raises(ValueError, match="max_root_nodes must be > 0"):
            TreeConfig(max_root_nodes=0)

    def test_global_config_rejects_unknown_log_level(self):
        """Test logging level validation."""
        with pytest.raises(ValueError, match="logging_level must be one of"):
            GlobalConfig(logging_level="VERBOSE")

    def test_global_config_rejects_non_positive_input_limit(self):
        """Test input size limit validation."""
        with pytest.raises(ValueError, match="max_input_size_bytes"):
            GlobalConfig(max_input_size_bytes=0)


class TestParserConfig:
    """Test suite for the composite ParserConfig."""

    def test_parser_config_is_frozen(self):
        """Test that ParserConfig instances are immutable."""
        config = ParserConfig()

        with pytest.raises(AttributeError):
            config.name = "changed"  # type: ignore

    def test_override_nested_fields(self):
        """Test component__field override notation."""
        config = ParserConfig()

        new_config = config.override(
            tokenization__escape_html=False,
            tree__max_root_nodes=10,
            name="custom",
        )

        assert new_config.tokenization.escape_html is False
        assert new_config.tree.max_root_nodes == 10
        assert new_config.name == "custom"
        # Original unchanged
        assert config.tokenization.escape_html is True
        assert config.tree.max_root_nodes == 2200

    def test_override_global_component(self):
        """Test the trailing underscore of global_ in override keys."""
        config = ParserConfig().override(
            global___logging_level="DEBUG",
            global___max_input_size_bytes=100,
        )

        assert config.global_.logging_level == "DEBUG"
        assert config.global_.max_input_size_bytes == 100

    def test_override_unknown_component_raises(self):
        """Test that an unknown component name is rejected."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig().override(renderer__enabled=True)

        assert exc_info.value.field_name == "renderer__enabled"
        assert exc_info.value.suggestions

    def test_override_invalid_value_raises(self):
        """Test that component validation errors are wrapped."""
        with pytest.raises(ConfigValidationError, match="max_root_nodes"):
            ParserConfig().override(tree__max_root_nodes=-1)

    def test_override_unknown_field_raises(self):
        """Test that an unknown field inside a component is rejected."""
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(tree__max_depth=5)

    def test_config_validation_error_is_config_error(self):
        """Test exception hierarchy."""
        assert issubclass(ConfigValidationError, ConfigError)

    def test_dict_round_trip(self):
        """Test to_dict/from_dict round trip."""
        config = ParserConfig.strict_resources()

        restored = ParserConfig.from_dict(config.to_dict())

        assert restored == config

    def test_json_serialization(self):
        """Test JSON output and parsing."""
        config = ParserConfig.trusted_markup()

        data = json.loads(config.to_json())
        restored = ParserConfig.from_json(config.to_json())

        assert data["tokenization"]["escape_html"] is False
        assert data["name"] == "trusted_markup"
        assert restored.tokenization.escape_html is False

    def test_from_dict_with_unknown_field_raises(self):
        """Test that from_dict wraps constructor errors."""
        with pytest.raises(ConfigValidationError, match="Invalid configuration data"):
            ParserConfig.from_dict({"tree": {"bogus": 1}})

    def test_from_dict_with_invalid_value_raises(self):
        """Test that from_dict wraps validation errors."""
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict({"global_": {"logging_level": "LOUD"}})


class TestPresets:
    """Test suite for preset factory methods."""

    def test_default_preset(self):
        """Test default preset."""
        config = ParserConfig.default()

        assert config.name == "default"
        assert config.tokenization.escape_html is True
        assert config.tree.abort_on_node_limit is False

    def test_trusted_markup_preset(self):
        """Test trusted markup preset disables escaping."""
        config = ParserConfig.trusted_markup()

        assert config.tokenization.escape_html is False

    def test_strict_resources_preset(self):
        """Test strict resources preset."""
        config = ParserConfig.strict_resources()

        assert config.tree.abort_on_node_limit is True
        assert config.global_.max_input_size_bytes == 1024 * 1024
