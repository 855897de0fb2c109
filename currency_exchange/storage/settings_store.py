"""
Exchange settings storage module.

Persists per-currency exchange settings as a JSON file. Uniqueness of
currency codes is enforced by the registry, not here.
"""

import json
import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from currency_exchange.exceptions import SettingNotFoundError, SettingsStoreError
from currency_exchange.models import (
    ExchangeRateMode,
    ExchangeRateStatus,
    ExchangeSetting,
    SettingChangeset,
    normalize_currency_code,
)

logger = logging.getLogger(__name__)

# Default path for settings file
DEFAULT_SETTINGS_PATH = "data/exchange_settings.json"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_setting_id() -> str:
    """Generate an opaque setting identifier."""
    return f"cxs_{uuid.uuid4().hex}"


class SettingsStore:
    """
    Manages persistent storage of exchange settings.

    Thread-safe: reads and writes go through a store-level lock, and the
    file is replaced atomically on every write. The in-memory copy is
    reused only while the file on disk is unchanged, and every mutation
    re-reads the file, so several processes can share one settings file.
    An unreadable file raises ``SettingsStoreError`` instead of being
    overwritten.
    """

    def __init__(self, settings_path: Optional[str] = None) -> None:
        """Initialize the settings store."""
        self.settings_path = Path(settings_path or DEFAULT_SETTINGS_PATH)
        self._lock = threading.RLock()
        self._settings: Optional[dict[str, ExchangeSetting]] = None
        self._signature: Optional[tuple[int, int]] = None

    def _file_signature(self) -> Optional[tuple[int, int]]:
        """(mtime_ns, size) of the settings file, None if it does not exist."""
        try:
            stat = self.settings_path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_mtime_ns, stat.st_size)

    def _load(self) -> dict[str, ExchangeSetting]:
        """
        Load settings from file.

        Raises:
            SettingsStoreError: If the file exists but cannot be parsed.
        """
        if not self.settings_path.exists():
            return {}

        path = str(self.settings_path)
        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Failed to load exchange settings from {path}: {e}")
            raise SettingsStoreError(f"Failed to read exchange settings: {e}", path=path)

        try:
            settings = {}
            for item in data.get("settings", []):
                setting = ExchangeSetting.from_dict(item)
                settings[setting.id] = setting
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid exchange setting entry in {path}: {e}")
            raise SettingsStoreError(f"Invalid exchange setting entry: {e}", path=path)
        return settings

    def _save(self, settings: dict[str, ExchangeSetting]) -> None:
        """Save settings to file (write to temp file, then replace)."""
        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.settings_path.with_suffix(self.settings_path.suffix + ".tmp")

        payload = {"settings": [s.to_dict() for s in settings.values()]}
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        os.replace(tmp_path, self.settings_path)

        self._settings = settings
        self._signature = self._file_signature()

    def _all(self, fresh: bool = False) -> dict[str, ExchangeSetting]:
        """Current settings; reloaded when the file changed or ``fresh`` is set."""
        signature = self._file_signature()
        if fresh or self._settings is None or signature != self._signature:
            self._settings = self._load()
            self._signature = signature
        return self._settings

    def list(
        self,
        currency_code: Optional[str] = None,
        status: Optional[ExchangeRateStatus] = None,
        mode: Optional[ExchangeRateMode] = None,
    ) -> list[ExchangeSetting]:
        """List settings, optionally filtered, ordered by currency code."""
        with self._lock:
            settings = list(self._all().values())

        if currency_code is not None:
            code = normalize_currency_code(currency_code)
            settings = [s for s in settings if s.currency_code == code]
        if status is not None:
            settings = [s for s in settings if s.status == status]
        if mode is not None:
            settings = [s for s in settings if s.mode == mode]

        return sorted(settings, key=lambda s: (s.currency_code, s.id))

    def get(self, setting_id: str) -> Optional[ExchangeSetting]:
        """Get a setting by id."""
        with self._lock:
            return self._all().get(setting_id)

    def find_by_code(self, currency_code: str) -> Optional[ExchangeSetting]:
        """Get the setting for a currency code, if one exists."""
        matches = self.list(currency_code=currency_code)
        return matches[0] if matches else None

    def create(
        self,
        currency_code: str,
        exchange_rate: float,
        mode: ExchangeRateMode = ExchangeRateMode.AUTO,
        status: ExchangeRateStatus = ExchangeRateStatus.ENABLE,
    ) -> ExchangeSetting:
        """Create and persist a new setting."""
        now = _now()
        setting = ExchangeSetting(
            id=generate_setting_id(),
            currency_code=normalize_currency_code(currency_code),
            exchange_rate=float(exchange_rate),
            mode=mode,
            status=status,
            created_at=now,
            updated_at=now,
        )

        with self._lock:
            settings = dict(self._all(fresh=True))
            settings[setting.id] = setting
            self._save(settings)

        logger.info(f"Created exchange setting {setting.id} for {setting.currency_code.upper()}")
        return setting

    def update(self, setting_id: str, changeset: SettingChangeset) -> ExchangeSetting:
        """
        Apply a changeset to a stored setting.

        Raises:
            SettingNotFoundError: If no setting has this id.
        """
        with self._lock:
            settings = dict(self._all(fresh=True))
            current = settings.get(setting_id)
            if current is None:
                raise SettingNotFoundError(setting_id)

            updated = changeset.apply_to(current)
            updated.updated_at = _now()
            settings[setting_id] = updated
            self._save(settings)

        return updated
