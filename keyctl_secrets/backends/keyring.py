"""
Kernel Keyring Secrets Backend

Implements SecretsBackend on top of KeyringClient.
"""

import logging
from typing import List, Optional

from ..client import KeyringClient
from ..config import DEFAULT_KEYRING, DEFAULT_KEYTYPE, KEYCTL_COMMAND
from ..errors import KeyNotExistError
from ..interface import SecretItem, SecretsBackend
from ..shell import is_command_available

logger = logging.getLogger(__name__)


class KeyringBackend(SecretsBackend):
    """
    Kernel keyring secrets backend.

    Config:
        keyring: Keyring to store secrets in (default: "@u")
        keytype: Key type used for lookups (default: "user")
        command: keyctl executable (default: "keyctl")
    """

    backend_type = "keyctl"

    def __init__(self, config: dict):
        super().__init__(config)
        self.keyring = config.get("keyring", DEFAULT_KEYRING)
        self.keytype = config.get("keytype", DEFAULT_KEYTYPE)
        self.command = config.get("command", KEYCTL_COMMAND)
        self._client: Optional[KeyringClient] = None

    async def connect(self) -> bool:
        """Check that keyctl is installed and bind a client."""
        if not is_command_available(self.command):
            logger.error(f"{self.command} command is not available, please install it")
            return False

        self._client = KeyringClient(self.keyring, self.keytype, self.command)
        logger.info(f"Connected to keyring {self.keyring} ({self.keytype})")
        return True

    async def disconnect(self) -> None:
        self._client = None

    async def _ensure_connected(self) -> KeyringClient:
        """Ensure we're connected, auto-connect if not."""
        if self._client is None:
            if not await self.connect():
                raise ConnectionError(f"{self.command} is not available")
        return self._client

    async def get(self, item: str) -> str:
        """Get a secret from the keyring."""
        client = await self._ensure_connected()
        try:
            keyid = await client.find_by_name(item)
            return await client.data_of(keyid)
        except KeyNotExistError as e:
            raise KeyError(f"Secret not found: {item} in {self.keyring}") from e

    async def set(self, title: str, value: str) -> SecretItem:
        """Create a secret, or replace its value if it already exists."""
        client = await self._ensure_connected()
        try:
            keyid = await client.find_by_name(title)
        except KeyNotExistError:
            keyid = await client.add(title, value)
        else:
            await client.update(keyid, value)

        return SecretItem(
            id=keyid,
            title=title,
            keyring=self.keyring,
            keytype=self.keytype,
            value=value,
        )

    async def delete(self, item: str) -> bool:
        """Revoke and unlink a secret."""
        client = await self._ensure_connected()
        try:
            keyid = await client.find_by_name(item)
            await client.remove(keyid)
        except KeyNotExistError:
            return False
        return True

    async def list(self, prefix: Optional[str] = None) -> List[str]:
        """List secret names in the keyring."""
        client = await self._ensure_connected()

        names = []
        for keyid in await client.list_ids():
            try:
                names.append(await client.name_of(keyid))
            except KeyNotExistError:
                logger.debug(f"Key {keyid} vanished while listing {self.keyring}")

        if prefix:
            names = [n for n in names if n.lower().startswith(prefix.lower())]

        return names

    async def exists(self, item: str) -> bool:
        """Check if a secret exists in the keyring."""
        client = await self._ensure_connected()
        return await client.exists(item)
