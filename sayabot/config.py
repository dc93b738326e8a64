"""
Configuration settings for the Saya verification bot.
"""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Load environment variables (safe - just reads .env file)
load_dotenv()

# Track initialization state for config.yaml loading
_initialized = False

# Discord Configuration
DISCORD_BOT_TOKEN = os.getenv("DISCORD_BOT_TOKEN")
COMMAND_PREFIX = os.getenv("PREFIX", ".")
BOT_NAME = os.getenv("BOT_NAME", "Saya")

# Project Paths
BASE_DIR = Path(__file__).parent.parent
CONFIG_YAML_PATH = BASE_DIR / "config.yaml"
SERVER_CONFIGS_PATH = Path(os.getenv("SERVER_CONFIGS_FILE", str(BASE_DIR / "server_configs.json")))

# Theme defaults, overridden by config.yaml
DEFAULT_THEME: dict = {
    "colors": {
        "primary": 0x000000,
        "accent": 0xFF0033,
        "success": 0x2ECC71,
        "error": 0xFF0033,
    },
    "footer": "Saya • by liro",
    "presence": "{prefix}help | Saya",
}

THEME: dict = {
    "colors": dict(DEFAULT_THEME["colors"]),
    "footer": DEFAULT_THEME["footer"],
    "presence": DEFAULT_THEME["presence"],
}


def init_config() -> None:
    """Initialize configuration by loading config.yaml.

    This function should be called once at application startup.
    It's safe to call multiple times.
    """
    global _initialized

    if _initialized:
        return

    if CONFIG_YAML_PATH.exists():
        try:
            with open(CONFIG_YAML_PATH, 'r', encoding='utf-8') as f:
                _apply_theme(yaml.safe_load(f) or {})
        except (OSError, yaml.YAMLError):
            pass  # Silently ignore config.yaml errors, keep the default theme

    _initialized = True


def _apply_theme(data: dict) -> None:
    """Merge a loaded config.yaml mapping into THEME."""
    if not isinstance(data, dict):
        return
    colors = data.get("colors")
    if isinstance(colors, dict):
        for name, value in colors.items():
            if isinstance(value, int):
                THEME["colors"][name] = value
    for key in ("footer", "presence"):
        if isinstance(data.get(key), str):
            THEME[key] = data[key]


def get_theme_color(name: str) -> int:
    """Get a theme color by name, falling back to the primary color."""
    colors = THEME["colors"]
    return colors.get(name, colors.get("primary", 0x000000))


def get_footer_text() -> str:
    """Get the footer text stamped on every embed."""
    return THEME["footer"]


def get_presence_text() -> str:
    """Get the activity text shown in the bot's presence."""
    return THEME["presence"].format(prefix=COMMAND_PREFIX)


def is_initialized() -> bool:
    """Check if configuration has been initialized."""
    return _initialized

# Verification workflow
NOTIFY_SCAN_LIMIT = 50  # recent notify-channel messages scanned for a notification
REJECTION_REASON_MAX_LENGTH = 1000
REJECTION_MODAL_TIMEOUT_SECONDS = 900  # dismissed forms are dropped from the modal store after this
REQUEST_RETENTION_MINUTES = int(os.getenv("REQUEST_RETENTION_MINUTES", "1440"))
REQUEST_CLEANUP_INTERVAL_MINUTES = 30

# Discord Message Configuration
MAX_EMBED_DESCRIPTION_LENGTH = 4096
