"""
Tests for configuration module.

This module tests configuration values, initialization, and the theme
loaded from config.yaml.
"""

from pathlib import Path
from unittest.mock import patch, mock_open

import pytest

import sayabot.config
from sayabot.config import (
    BASE_DIR,
    CONFIG_YAML_PATH,
    SERVER_CONFIGS_PATH,
    COMMAND_PREFIX,
    NOTIFY_SCAN_LIMIT,
    REJECTION_REASON_MAX_LENGTH,
    REQUEST_RETENTION_MINUTES,
    REQUEST_CLEANUP_INTERVAL_MINUTES,
    MAX_EMBED_DESCRIPTION_LENGTH,
    DEFAULT_THEME,
    init_config,
    is_initialized,
    get_theme_color,
    get_footer_text,
    get_presence_text,
)


@pytest.fixture
def fresh_theme():
    """Reset the theme and initialization flag around a test."""
    saved = (sayabot.config._initialized, dict(sayabot.config.THEME["colors"]),
             sayabot.config.THEME["footer"], sayabot.config.THEME["presence"])
    sayabot.config._initialized = False
    sayabot.config.THEME["colors"] = dict(DEFAULT_THEME["colors"])
    sayabot.config.THEME["footer"] = DEFAULT_THEME["footer"]
    sayabot.config.THEME["presence"] = DEFAULT_THEME["presence"]
    yield sayabot.config.THEME
    (sayabot.config._initialized, sayabot.config.THEME["colors"],
     sayabot.config.THEME["footer"], sayabot.config.THEME["presence"]) = saved


class TestConfigValues:
    """Tests for configuration values and their expected types/values."""

    def test_paths(self):
        """
        Tests path configurations:
        - BASE_DIR, CONFIG_YAML_PATH and SERVER_CONFIGS_PATH are Paths
        - config.yaml lives in the base directory
        """
        assert isinstance(BASE_DIR, Path)
        assert isinstance(CONFIG_YAML_PATH, Path)
        assert isinstance(SERVER_CONFIGS_PATH, Path)
        assert CONFIG_YAML_PATH.parent == BASE_DIR

    def test_verification_limits(self):
        """
        Tests verification constants:
        - 50 notify-channel messages are scanned
        - Rejection reasons allow up to 1000 characters
        - Retention and cleanup intervals are positive
        """
        assert NOTIFY_SCAN_LIMIT == 50
        assert REJECTION_REASON_MAX_LENGTH == 1000
        assert REQUEST_RETENTION_MINUTES > 0
        assert REQUEST_CLEANUP_INTERVAL_MINUTES > 0
        assert MAX_EMBED_DESCRIPTION_LENGTH == 4096

    def test_prefix(self):
        """Tests the command prefix is a non-empty string."""
        assert isinstance(COMMAND_PREFIX, str)
        assert len(COMMAND_PREFIX) > 0


class TestConfigInitialization:
    """Tests for configuration initialization and idempotency."""

    def test_init_config(self):
        """
        Tests init_config function:
        - Can be called without error
        - Is idempotent (multiple calls safe)
        - is_initialized returns True afterwards
        """
        init_config()
        init_config()

        assert is_initialized() is True

    def test_theme_loaded_from_yaml(self, fresh_theme):
        """
        Tests config.yaml theme overrides:
        - Listed colors replace defaults
        - Unlisted colors keep defaults
        - Footer and presence text are replaced
        """
        content = "colors:\n  accent: 0x123456\nfooter: Custom footer\npresence: '{prefix}verify'\n"
        with patch.object(Path, 'exists', return_value=True), \
             patch('builtins.open', mock_open(read_data=content)):
            init_config()

        assert get_theme_color("accent") == 0x123456
        assert get_theme_color("success") == DEFAULT_THEME["colors"]["success"]
        assert get_footer_text() == "Custom footer"
        assert get_presence_text() == f"{COMMAND_PREFIX}verify"

    def test_init_config_error_handling(self, fresh_theme):
        """
        Tests init_config error handling:
        - Invalid YAML keeps the default theme
        - OSError keeps the default theme
        - Initialization still completes
        """
        with patch.object(Path, 'exists', return_value=True), \
             patch('builtins.open', mock_open(read_data='colors: [unclosed')):
            init_config()
        assert sayabot.config._initialized is True
        assert get_footer_text() == DEFAULT_THEME["footer"]

        sayabot.config._initialized = False
        with patch.object(Path, 'exists', return_value=True), \
             patch('builtins.open', side_effect=OSError("Permission denied")):
            init_config()
        assert sayabot.config._initialized is True
        assert get_theme_color("primary") == DEFAULT_THEME["colors"]["primary"]

    def test_non_mapping_yaml_ignored(self, fresh_theme):
        """A config.yaml holding a list leaves the theme untouched."""
        with patch.object(Path, 'exists', return_value=True), \
             patch('builtins.open', mock_open(read_data='- a\n- b\n')):
            init_config()

        assert get_footer_text() == DEFAULT_THEME["footer"]


class TestThemeLookups:
    """Tests for theme accessors."""

    def test_unknown_color_falls_back_to_primary(self, fresh_theme):
        """Unknown color names resolve to the primary color."""
        assert get_theme_color("nonexistent") == get_theme_color("primary")

    def test_presence_includes_prefix(self, fresh_theme):
        """The default presence text includes the command prefix."""
        assert get_presence_text() == f"{COMMAND_PREFIX}help | Saya"
