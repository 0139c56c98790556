"""
keyctl-secrets

Typed asyncio access to the Linux kernel keyring through keyctl.

Usage:
    from keyctl_secrets import Key, KeyringClient

    # Entity API
    key = await Key.add("GitHub PAT", "ghp_...")
    print(key.data, key.data_hex)
    await key.update("ghp_rotated")
    await key.delete()

    # Client API, bound to a disposable keyring
    client = KeyringClient(keyring="@s")
    keyid = await client.add("db-password", "hunter2")
    ids = await client.list_ids()

    # Pluggable backend
    from keyctl_secrets.backends import BACKENDS
    backend = BACKENDS["keyctl"]({"keyring": "@u"})
    await backend.set("Jira API Key", "...")

keyctl must be installed; check with is_command_available("keyctl").
"""

from .client import KeyringClient
from .config import KeyringConfig, load_config
from .errors import (
    CommandExecutionError,
    InvalidArgumentError,
    KeyAlreadyExistError,
    KeyctlError,
    KeyctlOperationError,
    KeyNotExistError,
)
from .interface import SecretItem, SecretsBackend
from .key import Key
from .shell import CommandResult, is_command_available, run_command, run_command_checked

__all__ = [
    "Key",
    "KeyringClient",
    "KeyringConfig",
    "load_config",
    "SecretsBackend",
    "SecretItem",
    "KeyctlError",
    "KeyNotExistError",
    "KeyAlreadyExistError",
    "KeyctlOperationError",
    "CommandExecutionError",
    "InvalidArgumentError",
    "CommandResult",
    "is_command_available",
    "run_command",
    "run_command_checked",
]
