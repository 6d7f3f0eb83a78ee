"""Configuration management for unit-doctor host profiles.

Profiles live in ``<config dir>/profiles.yaml``; passwords go to the system
keyring when one is available and are replaced in the file by a marker.
"""

import logging
import os
from pathlib import Path
from typing import Any

import keyring
import yaml
from keyring.errors import KeyringError

from unit_doctor.connector.ssh import SSHConfig

logger = logging.getLogger(__name__)

KEYRING_MARKER = "__keyring__"
KEYRING_SERVICE = "unit-doctor"


def default_config_dir() -> Path:
    """~/.unit-doctor, unless UNIT_DOCTOR_CONFIG points elsewhere."""
    override = os.getenv("UNIT_DOCTOR_CONFIG")
    if override:
        return Path(override).expanduser().resolve()
    return Path.home() / ".unit-doctor"


class ConfigManager:
    """Reads and writes host profiles."""

    def __init__(self, config_dir: Path | None = None) -> None:
        self.config_dir = config_dir or default_config_dir()
        self.profiles_file = self.config_dir / "profiles.yaml"
        self.service_id = KEYRING_SERVICE

    def _read(self) -> dict[str, Any]:
        if not self.profiles_file.exists():
            return {}
        data = yaml.safe_load(self.profiles_file.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.profiles_file} must contain a mapping of profile names")
        return data

    def _write(self, profiles: dict[str, Any]) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        # create owner-only before any secret can land in it
        self.profiles_file.touch(mode=0o600)
        self.profiles_file.write_text(yaml.safe_dump(profiles), encoding="utf-8")

    def _store_password(self, name: str, password: str) -> str:
        """Returns what to write in the profile's password field."""
        try:
            keyring.set_password(self.service_id, name, password)
        except KeyringError as e:
            # Headless hosts often have no keyring backend
            logger.warning("Keyring unavailable (%s); storing password in %s", e, self.profiles_file)
            return password
        return KEYRING_MARKER

    def _fetch_password(self, name: str, stored: str | None) -> str | None:
        if stored != KEYRING_MARKER:
            return stored
        try:
            return keyring.get_password(self.service_id, name)
        except KeyringError as e:
            logger.warning("Could not read password for profile %s from keyring: %s", name, e)
            return None

    def add_profile(self, name: str, config: SSHConfig) -> None:
        """Add or replace a host profile."""
        profiles = self._read()
        profiles[name] = {
            "host": config.host,
            "user": config.user,
            "port": config.port,
            "key_path": config.key_path,
            "use_sudo": config.use_sudo,
            "password": self._store_password(name, config.password) if config.password else None,
        }
        self._write(profiles)

    def get_profile(self, name: str) -> SSHConfig | None:
        """SSHConfig for a profile, or None when there is no such profile."""
        record = self._read().get(name)
        if not record:
            return None
        return SSHConfig(
            host=record["host"],
            user=record.get("user", "root"),
            port=record.get("port", 22),
            key_path=record.get("key_path"),
            use_sudo=record.get("use_sudo", True),
            password=self._fetch_password(name, record.get("password")),
        )

    def list_profiles(self) -> dict[str, Any]:
        return self._read()

    def remove_profile(self, name: str) -> bool:
        """Delete a profile and its keyring entry. False when it did not exist."""
        profiles = self._read()
        record = profiles.pop(name, None)
        if record is None:
            return False

        if record.get("password") == KEYRING_MARKER:
            try:
                keyring.delete_password(self.service_id, name)
            except KeyringError as e:
                logger.warning("Could not remove keyring password for profile %s: %s", name, e)

        self._write(profiles)
        return True
