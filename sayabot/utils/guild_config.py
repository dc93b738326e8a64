"""
Per-guild verification settings stored in a flat JSON file.

The file maps guild IDs to records of the form
``{"verifiedRole": "<role id>", "notifyChannel": "<channel id>"}``.
A guild without a record has the verification workflow disabled.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ..config import SERVER_CONFIGS_PATH
from .logging import logger


@dataclass(frozen=True)
class GuildConfig:
    """Verification settings for one guild."""

    guild_id: int
    verified_role_id: int
    notify_channel_id: int

    @classmethod
    def from_record(cls, guild_id: int, record: dict) -> Optional["GuildConfig"]:
        """Build a config from a stored record, or None if it is malformed."""
        if not isinstance(record, dict):
            return None
        try:
            return cls(
                guild_id=int(guild_id),
                verified_role_id=int(record["verifiedRole"]),
                notify_channel_id=int(record["notifyChannel"]),
            )
        except (KeyError, TypeError, ValueError):
            return None

    def to_record(self) -> Dict[str, str]:
        """Serialize to the stored record shape."""
        return {
            "verifiedRole": str(self.verified_role_id),
            "notifyChannel": str(self.notify_channel_id),
        }


class GuildConfigStore:
    """JSON-backed guild configuration store.

    The file is read in full on every lookup so edits made by other
    processes are picked up without a restart.
    """

    def __init__(self, path: Path = SERVER_CONFIGS_PATH) -> None:
        self.path = Path(path)

    def load_configs(self) -> Dict[str, dict]:
        """Load every stored guild record.

        Returns:
            Mapping of guild ID strings to raw records; empty if the file
            is missing or unreadable.
        """
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading server configs from {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Server configs file {self.path} does not contain a JSON object")
            return {}
        return data

    def get_server_config(self, guild_id: int) -> Optional[GuildConfig]:
        """Get the verification config for a guild.

        Args:
            guild_id: Discord guild ID.

        Returns:
            The guild's config, or None when the guild is not configured.
        """
        record = self.load_configs().get(str(guild_id))
        if record is None:
            return None

        config = GuildConfig.from_record(guild_id, record)
        if config is None:
            logger.warning(f"Ignoring malformed server config for guild {guild_id}")
        return config

    def set_server_config(self, config: GuildConfig) -> None:
        """Create or overwrite the record for a guild."""
        configs = self.load_configs()
        configs[str(config.guild_id)] = config.to_record()
        self._save(configs)
        logger.info(
            f"Guild {config.guild_id}: verified role {config.verified_role_id}, "
            f"notify channel {config.notify_channel_id}"
        )

    def remove_server_config(self, guild_id: int) -> bool:
        """Remove a guild's record.

        Returns:
            True if a record was removed, False if none existed.
        """
        configs = self.load_configs()
        if configs.pop(str(guild_id), None) is None:
            return False
        self._save(configs)
        logger.info(f"Guild {guild_id}: verification config removed")
        return True

    def _save(self, configs: Dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(configs, f, indent=2)
        tmp_path.replace(self.path)


_config_store: Optional[GuildConfigStore] = None


def get_config_store() -> GuildConfigStore:
    """Get or create the global guild config store."""
    global _config_store
    if _config_store is None:
        _config_store = GuildConfigStore()
    return _config_store


def reset_config_store() -> None:
    """Reset the global config store (useful for testing)."""
    global _config_store
    _config_store = None
