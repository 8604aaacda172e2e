"""Config Store — the single JSON record that outlives a CLI invocation."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, replace
from pathlib import Path

from zoho_mail.errors import ValidationError

logger = logging.getLogger(__name__)

#: Zoho data-center domains; each selects ``https://mail.{region}/api``.
REGIONS: tuple[str, ...] = ("zoho.com", "zoho.eu", "zoho.in", "zoho.com.au", "zoho.jp")

DEFAULT_USER_ID = "default"

# On-disk key ↔ dataclass field
_KEYS: dict[str, str] = {
    "region": "region",
    "accountId": "account_id",
    "userId": "user_id",
    "defaultFolder": "default_folder",
}


@dataclass(frozen=True)
class ZohoConfig:
    region: str = "zoho.com"
    account_id: str = ""
    user_id: str = ""
    default_folder: str = "Inbox"

    @property
    def base_url(self) -> str:
        return f"https://mail.{self.region}/api"

    def to_json(self) -> dict[str, str]:
        """Serialise with the camelCase keys used in the config file."""
        values = asdict(self)
        return {key: values[attr] for key, attr in _KEYS.items()}


def validate_region(region: str) -> str:
    if region not in REGIONS:
        raise ValidationError(
            f"Invalid region {region!r}. Valid options: {', '.join(REGIONS)}"
        )
    return region


class ConfigStore:
    """Get/set/clear of the persisted ZohoConfig."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> ZohoConfig:
        """Return the stored config, falling back to defaults field by field."""
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return ZohoConfig()
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable config at %s: %s", self._path, exc)
            return ZohoConfig()
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed config at %s", self._path)
            return ZohoConfig()

        values = {
            attr: raw[key]
            for key, attr in _KEYS.items()
            if isinstance(raw.get(key), str)
        }
        return ZohoConfig(**values)

    def set(
        self,
        *,
        region: str | None = None,
        account_id: str | None = None,
        user_id: str | None = None,
        default_folder: str | None = None,
    ) -> ZohoConfig:
        """Merge the given fields into the stored config and persist it."""
        updates: dict[str, str] = {}
        if region is not None:
            updates["region"] = validate_region(region)
        for name, value in (("account_id", account_id), ("user_id", user_id)):
            if value is None:
                continue
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{name} must be a non-empty string")
            updates[name] = value.strip()
        if default_folder is not None:
            updates["default_folder"] = default_folder

        config = replace(self.get(), **updates)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(config.to_json(), indent=2) + "\n", encoding="utf-8")
        logger.debug("Config written to %s: %s", self._path, updates)
        return config

    def clear(self) -> None:
        """Reset every field to its default by removing the file."""
        self._path.unlink(missing_ok=True)
        logger.debug("Config cleared (%s)", self._path)

    def is_configured(self) -> bool:
        config = self.get()
        return bool(config.account_id and config.user_id)

    def user_id_or_default(self) -> str:
        return self.get().user_id or DEFAULT_USER_ID
