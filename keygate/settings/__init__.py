"""keygate system settings package.

Public API:
  - SystemSettings: reads the multi_user_mode flag fresh on every call
  - parse_flag()  : text setting → bool
"""

from __future__ import annotations

from keygate.settings.system_settings import SystemSettings, parse_flag

__all__ = [
    "SystemSettings",
    "parse_flag",
]
