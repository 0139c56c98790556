"""
Key entity

A handle on one key id with its name and payload read from the keyring.
Loading is async, so bound keys are built with the factory classmethods:

    key = await Key.add("api-token", "s3cr3t")
    key = await Key.search("api-token")
    keys = await Key.list()
    await key.update("rotated")
    await key.delete()
"""

from typing import List, Optional

from .client import KeyringClient
from .errors import InvalidArgumentError, KeyctlOperationError
from .shell import Payload


class Key:
    """A key in a kernel keyring."""

    def __init__(
        self,
        keyid: int = 0,
        keyring: Optional[str] = None,
        keytype: Optional[str] = None,
        client: Optional[KeyringClient] = None,
    ):
        """
        Create the unbound handle without touching the keyring.

        Only keyid 0 is accepted here; use Key.create(keyid) to get a
        bound handle with its fields loaded.

        Raises:
            InvalidArgumentError: A non-zero keyid was given
        """
        if keyid:
            raise InvalidArgumentError(f"Use 'await Key.create({keyid})' to load a bound key.")
        self.id = 0
        self.name = ""
        self.data = ""
        self.data_hex = ""
        self._keyctl = client or KeyringClient(keyring, keytype)

    @classmethod
    async def create(
        cls,
        keyid: int = 0,
        keyring: Optional[str] = None,
        keytype: Optional[str] = None,
        client: Optional[KeyringClient] = None,
    ) -> "Key":
        """
        Build a handle and, for a non-zero id, load its fields.

        Raises:
            KeyNotExistError: The id does not exist
        """
        key = cls(keyring=keyring, keytype=keytype, client=client)
        if keyid:
            await key._load(keyid)
        return key

    async def _load(self, keyid: int) -> None:
        name = await self._keyctl.name_of(keyid)
        data = await self._keyctl.data_of(keyid)
        data_hex = await self._keyctl.data_of(keyid, "hex")

        self.id = keyid
        self.name = name
        self.data = data
        self.data_hex = data_hex

    async def reload(self) -> None:
        """Re-read name, data and hex data from the keyring."""
        await self._load(self.id)

    @classmethod
    async def list(
        cls,
        keyring: Optional[str] = None,
        keytype: Optional[str] = None,
        client: Optional[KeyringClient] = None,
    ) -> List["Key"]:
        """Load every key linked into the keyring."""
        keyctl = client or KeyringClient(keyring, keytype)
        keys = []
        for keyid in await keyctl.list_ids():
            keys.append(await cls.create(keyid, client=keyctl))
        return keys

    @classmethod
    async def search(
        cls,
        name: str,
        keyring: Optional[str] = None,
        keytype: Optional[str] = None,
        client: Optional[KeyringClient] = None,
    ) -> "Key":
        """Load the key with this name."""
        keyctl = client or KeyringClient(keyring, keytype)
        keyid = await keyctl.find_by_name(name)
        return await cls.create(keyid, client=keyctl)

    @classmethod
    async def add(
        cls,
        name: str,
        data: Payload,
        keyring: Optional[str] = None,
        keytype: Optional[str] = None,
        client: Optional[KeyringClient] = None,
    ) -> "Key":
        """Create a key and load it."""
        keyctl = client or KeyringClient(keyring, keytype)
        keyid = await keyctl.add(name, data)
        return await cls.create(keyid, client=keyctl)

    async def update(self, data: Payload) -> None:
        """Replace the payload and reload the cached fields."""
        await self._keyctl.update(self.id, data)
        await self.reload()

    async def delete(self) -> None:
        """
        Revoke and unlink this key. Cached fields are left as they were.

        Raises:
            KeyctlOperationError: The handle is unbound
            KeyNotExistError: The key is already gone
        """
        if not self.id:
            raise KeyctlOperationError("Cannot delete an unbound key (id 0).")
        await self._keyctl.remove(self.id)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}({self.id}, '{self.name}', '{self.data}')>"
