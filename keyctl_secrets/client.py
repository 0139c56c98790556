"""
Keyring client

Translates keyring operations into keyctl invocations and parses the
replies into ids, names and payloads. Exit codes are the only failure
signal keyctl gives, and it overloads them: code 1 means the key is gone
for most commands, anything else is a real failure.

Usage:
    from keyctl_secrets import KeyringClient

    client = KeyringClient()                  # @u / user
    keyid = await client.add("db-password", "hunter2")
    value = await client.data_of(keyid)
    await client.remove(keyid)
"""

import logging
from pathlib import Path
from typing import List, Optional

from .config import KeyringConfig, load_config
from .errors import (
    InvalidArgumentError,
    KeyAlreadyExistError,
    KeyctlOperationError,
    KeyNotExistError,
)
from .shell import Payload, run_command, run_command_checked

logger = logging.getLogger(__name__)

# keyctl exit code for "key not found / revoked / expired"
EXIT_NOT_FOUND = 1

# data_of mode -> keyctl subcommand
DATA_MODES = {
    "raw": "pipe",
    "hex": "read",
}


def _parse_id(token: str, out: str, keyname: Optional[str] = None) -> int:
    """Parse a key id printed by keyctl."""
    try:
        return int(token.strip())
    except ValueError:
        raise KeyctlOperationError(
            keyname=keyname, errmsg=f"unexpected keyctl output {out!r}", stdout=out
        ) from None


class KeyringClient:
    """
    keyctl bound to one keyring and key type.

    Each instance is an explicit handle on a (keyring, type) scope;
    nothing is cached, every call queries keyctl again.
    """

    def __init__(
        self,
        keyring: Optional[str] = None,
        keytype: Optional[str] = None,
        command: Optional[str] = None,
        config: Optional[KeyringConfig] = None,
    ):
        """Unset arguments come from config, or from load_config() when no config is given."""
        config = config or load_config()
        self._keyring = keyring or config.keyring
        self._keytype = keytype or config.keytype
        self._command = command or config.command

    @classmethod
    def from_config(cls, path: Optional[Path] = None) -> "KeyringClient":
        """Build a client from the config file and environment."""
        return cls(config=load_config(path))

    @property
    def keyring(self) -> str:
        return self._keyring

    @property
    def keytype(self) -> str:
        return self._keytype

    @property
    def command(self) -> str:
        return self._command

    def _argv(self, *args) -> List[str]:
        return [self._command, *[str(arg) for arg in args]]

    async def list_ids(self) -> List[int]:
        """Ids of every key linked into the keyring, in keyctl's order."""
        out = (await run_command_checked(self._argv("rlist", self._keyring))).rstrip()
        if not out:
            return []
        return [_parse_id(token, out) for token in out.split()]

    async def find_by_name(self, name: str) -> int:
        """
        Resolve a key name to its id.

        Raises:
            KeyNotExistError: If search reports any failure
        """
        code, out, _ = await run_command(
            self._argv("search", self._keyring, self._keytype, name)
        )
        if code != 0:
            raise KeyNotExistError(keyname=name)
        return _parse_id(out, out, keyname=name)

    async def name_of(self, keyid: int) -> str:
        """
        Get the description (name) of a key.

        rdescribe prints type;uid;gid;perm;description. The description
        may itself contain semicolons, so everything from the fifth field
        on is the name.
        """
        code, out, _ = await run_command(self._argv("rdescribe", keyid))
        if code != 0:
            raise KeyNotExistError(keyid=keyid)
        return ";".join(out.split(";")[4:]).rstrip()

    async def data_of(self, keyid: int, mode: str = "raw") -> str:
        """
        Read a key's payload.

        Args:
            keyid: Key id
            mode: "raw" for the payload as stored, "hex" for a contiguous
                  lowercase hex string (case-insensitive)

        Raises:
            InvalidArgumentError: Unknown mode (keyctl is not invoked)
            KeyNotExistError: Key does not exist
            KeyctlOperationError: Any other keyctl failure
        """
        mode = mode.lower()
        if mode not in DATA_MODES:
            raise InvalidArgumentError("mode must be one of ['raw', 'hex'].")

        code, out, err = await run_command(self._argv(DATA_MODES[mode], keyid))
        if code == EXIT_NOT_FOUND:
            raise KeyNotExistError(keyid=keyid)
        if code != 0:
            raise KeyctlOperationError(
                keyid=keyid, errmsg=f"({code}){err}", returncode=code, stderr=err, stdout=out
            )

        if mode == "raw":
            return out

        # "N bytes of data in key:" header, then space-separated hex groups
        lines = [line.rstrip() for line in out.split("\n")]
        return "".join(lines[1:]).replace(" ", "")

    async def exists(self, name: str) -> bool:
        """Check whether a live key with this name is in scope."""
        try:
            await self.find_by_name(name)
        except KeyNotExistError:
            return False
        return True

    async def add(self, name: str, data: Payload) -> int:
        """
        Create a key and return its id.

        keyctl padd silently replaces a key with the same description, so
        the name is looked up first.

        Raises:
            KeyAlreadyExistError: A live key already has this name
            KeyctlOperationError: keyctl padd failed
        """
        try:
            keyid = await self.find_by_name(name)
        except KeyNotExistError:
            pass
        else:
            raise KeyAlreadyExistError(keyid=keyid, keyname=name)

        out = await run_command_checked(
            self._argv("padd", self._keytype, name, self._keyring), data
        )
        keyid = _parse_id(out, out, keyname=name)
        logger.debug(f"Added key {keyid} to {self._keyring}")
        return keyid

    async def update(self, keyid: int, data: Payload) -> None:
        """
        Replace a key's payload; the id is unchanged.

        Raises:
            KeyNotExistError: Key does not exist
            KeyctlOperationError: Any other keyctl failure
        """
        code, out, err = await run_command(self._argv("pupdate", keyid), data)
        if code == EXIT_NOT_FOUND:
            raise KeyNotExistError(keyid=keyid)
        if code != 0:
            raise KeyctlOperationError(
                keyid=keyid, errmsg=f"({code}){err}", returncode=code, stderr=err, stdout=out
            )

    async def remove(self, keyid: int) -> None:
        """
        Revoke a key, then unlink it from the keyring.

        Raises:
            KeyNotExistError: Key does not exist
            KeyctlOperationError: revoke or unlink failed
        """
        # revoke first, unlinking a valid key is slow
        code, out, err = await run_command(self._argv("revoke", keyid))
        if code == EXIT_NOT_FOUND:
            raise KeyNotExistError(keyid=keyid)
        if code != 0:
            raise KeyctlOperationError(
                keyid=keyid, errmsg=f"({code}){err}", returncode=code, stderr=err, stdout=out
            )

        await run_command_checked(self._argv("unlink", keyid, self._keyring))
        logger.debug(f"Removed key {keyid} from {self._keyring}")

    async def clear(self) -> None:
        """Unlink every key from the keyring."""
        await run_command_checked(self._argv("clear", self._keyring))

    def __repr__(self) -> str:
        return f"<{type(self).__name__}({self._keyring!r}, {self._keytype!r})>"
