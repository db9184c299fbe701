"""Configuration module for loading and managing application settings"""
from typing import Dict, Any, Optional
from .lib.load_qtep_conf import load_qtep_conf, QtepConfigError
from .lib.load_settings_conf import load_settings_conf, SettingsError
import os

__all__ = [
    'load_config',
    'load_settings_conf',
    'load_qtep_conf',
    'SettingsError',
    'QtepConfigError',
    'SETTINGS_ENV',
]

# Directory holding settings.conf
SETTINGS_ENV = 'QTEP_INSIGHT_SETTINGS'

def load_config(settings_path: Optional[str] = None) -> Dict[str, Any]:
    """Load settings.conf and the qtep.conf it points at.

    Args:
        settings_path: Optional directory containing settings.conf. Falls back to
                       $QTEP_INSIGHT_SETTINGS, then the current directory.

    Returns:
        Dict with 'settings' (settings.conf values) and 'node' (qtep.conf values)
    """
    settings_path = settings_path or os.environ.get(SETTINGS_ENV, '.')

    try:
        settings_conf: Dict[str, Any] = load_settings_conf(settings_path)
        qtep_conf: Dict[str, Any] = load_qtep_conf(settings_conf['qtep_root'])

    except (SettingsError, QtepConfigError) as e:
        # Re-raise the error but provide more context
        raise type(e)(
            f"Configuration Error\n"
            "=================\n\n"
            f"{str(e)}\n\n"
            "Please ensure both settings.conf and qtep.conf are properly configured."
        ) from e

    return {'settings': settings_conf, 'node': qtep_conf}
