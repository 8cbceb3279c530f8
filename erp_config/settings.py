"""
ERP settings (``erp_config.settings``).

Responsibility
--------------
Defines ``ErpSettings``, the frozen set of runtime knobs the kernel and
modules read: database connection, default currency, AP payment terms,
invoice tax rate, logging level.

Resolution order (later wins):

1. dataclass defaults
2. a YAML file (explicit ``path`` or ``ERP_CONFIG_FILE``)
3. ``ERP_<FIELD>`` environment variables, e.g. ``ERP_DEFAULT_CURRENCY=USD``

Failure modes
-------------
* Unknown key in the YAML file or an unparseable value -> ``ValueError``.
* Missing YAML file -> ``FileNotFoundError`` propagates.
* Malformed YAML -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

ENV_PREFIX = "ERP_"
CONFIG_FILE_ENV = "ERP_CONFIG_FILE"


@dataclass(frozen=True)
class ErpSettings:
    """Immutable runtime configuration."""

    database_url: str = "sqlite:///erp.db"
    sql_echo: bool = False
    pool_size: int = 10
    default_currency: str = "KRW"
    ap_payment_terms_days: int = 30
    invoice_tax_rate: Decimal = Decimal("10.0")
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if len(self.default_currency) != 3:
            raise ValueError(
                f"default_currency must be a 3-letter code, got {self.default_currency!r}"
            )
        if self.ap_payment_terms_days < 0:
            raise ValueError("ap_payment_terms_days must not be negative")
        if not Decimal("0") <= self.invoice_tax_rate <= Decimal("100"):
            raise ValueError("invoice_tax_rate must be between 0 and 100")
        if self.pool_size < 1:
            raise ValueError("pool_size must be at least 1")

    @classmethod
    def with_defaults(cls) -> ErpSettings:
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ErpSettings:
        return cls.with_defaults().merged(data)

    def merged(self, data: Mapping[str, Any]) -> ErpSettings:
        """Return a copy with ``data`` applied; values are coerced per field."""
        known = {f.name: f for f in fields(self)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        changes = {
            name: _coerce(name, default_type=type(getattr(self, name)), value=value)
            for name, value in data.items()
        }
        return replace(self, **changes)


def _coerce(name: str, default_type: type, value: Any) -> Any:
    try:
        if default_type is bool:
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in ("1", "true", "yes", "on"):
                return True
            if text in ("0", "false", "no", "off"):
                return False
            raise ValueError(value)
        if default_type is int:
            return int(value)
        if default_type is Decimal:
            return Decimal(str(value))
        return str(value)
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise ValueError(f"Invalid value for {name}: {value!r}") from exc


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load one YAML mapping; an empty file yields an empty dict."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    # Allow the settings to live under an ``erp:`` section.
    if set(data) == {"erp"} and isinstance(data["erp"], dict):
        return dict(data["erp"])
    return data


def _env_overrides(env: Mapping[str, str]) -> dict[str, str]:
    names = {f.name for f in fields(ErpSettings)}
    overrides: dict[str, str] = {}
    for key, value in env.items():
        if not key.startswith(ENV_PREFIX) or key == CONFIG_FILE_ENV:
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name in names:
            overrides[name] = value
    return overrides


def load_settings(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ErpSettings:
    """Resolve settings from defaults, the YAML file and the environment."""
    env = os.environ if env is None else env
    settings = ErpSettings.with_defaults()

    config_path = path or env.get(CONFIG_FILE_ENV)
    if config_path:
        settings = settings.merged(load_yaml_file(Path(config_path)))

    return settings.merged(_env_overrides(env))


_cached: ErpSettings | None = None


def get_settings() -> ErpSettings:
    """Process-wide settings, loaded once."""
    global _cached
    if _cached is None:
        _cached = load_settings()
    return _cached


def reset_settings() -> None:
    """Forget the cached settings. FOR TESTING ONLY."""
    global _cached
    _cached = None
