"""Settings configuration loader module.

This module handles loading and parsing of the main settings.conf file which contains
general application settings, including the path to the Qtep configuration directory.

The settings file uses INI format with a [DEFAULT] section containing key-value pairs.

Settings:
    qtep_root: Path to the Qtep configuration directory (holding qtep.conf)
    api_host: Interface the API server binds to
    api_port: Port the API server listens on
    rpc_timeout: Seconds to wait for a single node RPC call
    request_timeout: Seconds an API request may take end to end
    log_level: Logging level name

Example settings.conf:
    [DEFAULT]
    qtep_root = /home/user/.qtep/
    api_port = 3001

Raises:
    SettingsError: If the settings file is missing, invalid, or missing required settings
"""
from configparser import ConfigParser
from pathlib import Path
from typing import Dict, Any, List
import os

class ConfigValidationError:
    """Helper class to format configuration validation errors"""
    def __init__(self):
        self.missing: List[str] = []
        self.invalid_paths: List[str] = []

    def has_errors(self) -> bool:
        """Check if any errors exist"""
        return bool(self.missing or self.invalid_paths)

    def format_message(self) -> str:
        """Format error message in a clean, readable way"""
        messages = []

        if self.missing:
            messages.append("Missing required settings:")
            messages.extend(f"  - {item}" for item in self.missing)

        if self.invalid_paths:
            if messages:
                messages.append("")
            messages.append("Invalid paths (directory does not exist):")
            messages.extend(f"  - {item}" for item in self.invalid_paths)

        return "\n".join(messages)

class SettingsError(Exception):
    """Raised when there are issues loading or parsing the settings configuration."""
    pass

# Default settings
DEFAULTS = {
    'qtep_root': os.path.expanduser('~/.qtep'),
    'api_host': '0.0.0.0',
    'api_port': '3001',
    'rpc_timeout': '10',
    'request_timeout': '30',
    'log_level': 'INFO',
}

LOG_LEVELS = ('CRITICAL', 'ERROR', 'WARNING', 'INFO', 'DEBUG')

def load_settings_conf(settings_path: str = ".") -> Dict[str, Any]:
    """Load and parse settings.conf file with strict validation

    Args:
        settings_path: Directory containing settings.conf

    Returns:
        Dictionary containing parsed settings, defaults filled in

    Raises:
        SettingsError: If file not found, parsing fails, or validation fails
    """
    config_path = Path(settings_path) / 'settings.conf'

    if not config_path.exists():
        raise SettingsError(
            f"Settings file not found at: {config_path}\n"
            "Please create settings.conf based on examples/settings.conf.example"
        )

    try:
        parser = ConfigParser(defaults=DEFAULTS)
        parser.read(config_path)

        errors = ConfigValidationError()

        settings = dict(parser['DEFAULT'])

        if not settings.get('qtep_root'):
            errors.missing.append('qtep_root')
        else:
            qtep_root = Path(settings['qtep_root']).expanduser().resolve()
            if not qtep_root.exists():
                errors.invalid_paths.append(f"qtep_root: {qtep_root}")
            else:
                settings['qtep_root'] = str(qtep_root)

        if errors.has_errors():
            raise SettingsError(
                "Settings Configuration Validation Failed\n\n" +
                errors.format_message()
            )

        return validate_settings(settings)

    except Exception as e:
        if isinstance(e, SettingsError):
            raise
        raise SettingsError(f"Error parsing settings.conf: {str(e)}")

def validate_settings(settings: Dict[str, Any]) -> Dict[str, Any]:
    """Validate loaded settings.

    Args:
        settings: Dictionary of settings to validate

    Returns:
        Validated and processed settings

    Raises:
        SettingsError: If validation fails
    """
    try:
        settings['api_port'] = int(settings['api_port'])
        settings['rpc_timeout'] = float(settings['rpc_timeout'])
        settings['request_timeout'] = float(settings['request_timeout'])
        settings['log_level'] = settings['log_level'].upper()

        if not 0 < settings['api_port'] < 65536:
            raise ValueError("api_port must be between 1 and 65535")
        if settings['rpc_timeout'] <= 0:
            raise ValueError("rpc_timeout must be positive")
        if settings['request_timeout'] <= 0:
            raise ValueError("request_timeout must be positive")
        if settings['log_level'] not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        return settings

    except (ValueError, KeyError) as e:
        raise SettingsError(f"Invalid settings configuration: {str(e)}")
