"""Qtep configuration loader module.

This module handles loading and parsing of the Qtep node's configuration file (qtep.conf).
Only the settings the explorer API depends on are validated: RPC access and the
indexes that back transaction, address and spent-output lookups.

The configuration file uses a simple key=value format, with one setting per line.
Comments start with #.

Required settings:
    - server=1 (Required for RPC functionality)
    - rpcuser (RPC authentication username)
    - rpcpassword (RPC authentication password)
    - rpcport (Port for RPC connections)
    - txindex=1 (Lookup of arbitrary transactions)
    - addressindex=1 (Address history)

Optional settings:
    - rpcbind (Interface the node listens on for RPC, defaults to 127.0.0.1)
    - spentindex=1 (Spent output information in transaction outputs)

Example qtep.conf:
    server=1
    rpcuser=user
    rpcpassword=password
    rpcport=3889
    txindex=1
    addressindex=1
    spentindex=1

Raises:
    QtepConfigError: If the configuration file is missing, invalid, or missing required settings
"""
from pathlib import Path
from typing import Dict, Any, Union, List
import logging

logger = logging.getLogger(__name__)

class ConfigValidationError:
    """Helper class to format configuration validation errors"""
    def __init__(self):
        self.missing: List[str] = []
        self.invalid: List[str] = []
        self.disabled: List[str] = []

    def has_errors(self) -> bool:
        """Check if any errors exist"""
        return bool(self.missing or self.invalid or self.disabled)

    def format_message(self) -> str:
        """Format error message in a clean, readable way"""
        messages = []

        if self.missing:
            messages.append("Missing required settings:")
            messages.extend(f"  - {item}" for item in self.missing)

        if self.invalid:
            if messages:
                messages.append("")
            messages.append("Invalid setting types:")
            messages.extend(f"  - {item}" for item in self.invalid)

        if self.disabled:
            if messages:
                messages.append("")
            messages.append("Required settings that must be enabled (set to 1):")
            messages.extend(f"  - {item}" for item in self.disabled)

        return "\n".join(messages)

class QtepConfigError(Exception):
    """Raised when there's an error loading Qtep configuration"""
    pass

def parse_value(value: str) -> Union[str, int, float, bool]:
    """Parse configuration values to appropriate types"""
    # 1/0 are flags in qtep.conf
    if value.lower() in ('true', '1', 'yes', 'on'):
        return True
    if value.lower() in ('false', '0', 'no', 'off'):
        return False

    try:
        if '.' in value:
            return float(value)
        return int(value)
    except ValueError:
        return value

# Credentials and hosts are never coerced
RAW_KEYS = {'rpcuser', 'rpcpassword', 'rpcbind'}

def parse_qtep_conf(text: str) -> Dict[str, Any]:
    """Parse the key=value body of a qtep.conf file"""
    config = {}
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith('#'):
            try:
                key, value = line.split('=', 1)
            except ValueError:
                logger.warning(f"Skipping invalid line in qtep.conf: {line}")
                continue
            key, value = key.strip(), value.strip()
            config[key] = value if key in RAW_KEYS else parse_value(value)
    return config

def load_qtep_conf(qtep_root: str) -> Dict[str, Any]:
    """
    Load and parse qtep.conf file with strict validation

    Args:
        qtep_root: Path to Qtep configuration directory

    Returns:
        Dictionary containing parsed Qtep settings

    Raises:
        QtepConfigError: If file not found, parsing fails, or validation fails
    """
    config_path = Path(qtep_root) / 'qtep.conf'

    if not config_path.exists():
        raise QtepConfigError(
            f"Qtep configuration file not found at: {config_path}\n"
            "Please ensure qtep.conf exists in your Qtep configuration directory"
        )

    try:
        config = parse_qtep_conf(config_path.read_text())

        errors = ConfigValidationError()

        required_settings = {
            'rpcuser': str,
            'rpcpassword': str,
            'rpcport': int,
            'server': bool,
            'txindex': bool,
            'addressindex': bool
        }

        for key, expected_type in required_settings.items():
            if key not in config:
                errors.missing.append(key)
            elif not isinstance(config[key], expected_type):
                errors.invalid.append(f"{key} (expected {expected_type.__name__})")
            elif expected_type == bool and not config[key]:
                errors.disabled.append(key)

        if errors.has_errors():
            raise QtepConfigError(
                "Qtep Configuration Validation Failed\n\n" +
                errors.format_message()
            )

        if not config.get('spentindex'):
            logger.warning("spentindex is not enabled; outputs will be reported without spent info")

        return config

    except Exception as e:
        if isinstance(e, QtepConfigError):
            raise
        raise QtepConfigError(f"Error parsing qtep.conf: {str(e)}")
