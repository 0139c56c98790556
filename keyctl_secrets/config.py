"""
Shared configuration for keyctl-secrets.

Defaults live here as module constants. A JSON file and environment
variables can override them; every KeyringClient built without an
explicit config (including the ones Key creates) reads them:

    ~/.config/keyctl-secrets/config.json
    {
        "keyring": "@s",
        "keytype": "user",
        "command": "keyctl"
    }

    KEYCTL_SECRETS_KEYRING / KEYCTL_SECRETS_KEYTYPE / KEYCTL_SECRETS_COMMAND
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# keyctl defaults
DEFAULT_KEYRING = "@u"
DEFAULT_KEYTYPE = "user"
KEYCTL_COMMAND = "keyctl"

# Config file
CONFIG_PATH = Path.home() / ".config" / "keyctl-secrets" / "config.json"

# Environment overrides
ENV_KEYRING = "KEYCTL_SECRETS_KEYRING"
ENV_KEYTYPE = "KEYCTL_SECRETS_KEYTYPE"
ENV_COMMAND = "KEYCTL_SECRETS_COMMAND"


@dataclass
class KeyringConfig:
    """Keyring scope and tool location used by a client."""
    keyring: str = DEFAULT_KEYRING
    keytype: str = DEFAULT_KEYTYPE
    command: str = KEYCTL_COMMAND


def load_config(path: Optional[Path] = None) -> KeyringConfig:
    """
    Load keyring configuration.

    File values override the defaults, environment variables override
    the file. A missing file is fine; a broken one is logged and ignored.

    Args:
        path: Config file (default: CONFIG_PATH)

    Returns:
        KeyringConfig
    """
    config_path = path or CONFIG_PATH
    data = {}

    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value must be an object")
            logger.info(f"Loaded keyring config from {config_path}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load keyring config {config_path}: {e}")
            data = {}
    else:
        logger.info("Using default keyring configuration")

    config = KeyringConfig(
        keyring=data.get("keyring", DEFAULT_KEYRING),
        keytype=data.get("keytype", DEFAULT_KEYTYPE),
        command=data.get("command", KEYCTL_COMMAND),
    )

    config.keyring = os.getenv(ENV_KEYRING, config.keyring)
    config.keytype = os.getenv(ENV_KEYTYPE, config.keytype)
    config.command = os.getenv(ENV_COMMAND, config.command)

    return config
