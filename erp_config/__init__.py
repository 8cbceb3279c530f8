"""
ERP configuration.

The single public entry point for runtime configuration is
``get_settings()``.  Tests and scripts that need explicit values build an
``ErpSettings`` directly or call ``load_settings(path, env)``.
"""

from erp_config.settings import (
    ErpSettings,
    get_settings,
    load_settings,
    load_yaml_file,
    reset_settings,
)

__all__ = [
    "ErpSettings",
    "get_settings",
    "load_settings",
    "load_yaml_file",
    "reset_settings",
]
