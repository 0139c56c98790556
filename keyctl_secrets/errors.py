"""
Errors raised by keyctl-secrets.

Every public operation either returns a valid result or raises exactly
one of the KeyctlError subclasses below.
"""

from typing import Optional, Sequence


def describe_key(keyid=None, keyname: Optional[str] = None) -> str:
    """Short descriptor used in error messages."""
    if keyid and keyname:
        return f"('{keyid}' / '{keyname}')"
    if keyid:
        return f"('{keyid}')"
    if keyname:
        return f"('{keyname}')"
    return "(undef)"


class KeyctlError(Exception):
    """Base class for all keyctl-secrets errors."""


class KeyNotExistError(KeyctlError):
    """The key name or id does not exist in the keyring."""

    def __init__(self, message: str = "", keyid=None, keyname: Optional[str] = None):
        self.keyid = keyid
        self.keyname = keyname
        if not message:
            message = f"Key {describe_key(keyid, keyname)} does not exist in kernel keyring."
        super().__init__(message)


class KeyAlreadyExistError(KeyctlError):
    """A key with the requested name is already live in the keyring."""

    def __init__(self, message: str = "", keyid=None, keyname: Optional[str] = None):
        self.keyid = keyid
        self.keyname = keyname
        if not message:
            message = f"Key {describe_key(keyid, keyname)} already exists in kernel keyring."
        super().__init__(message)


class KeyctlOperationError(KeyctlError):
    """keyctl ran but reported a failure other than not-found."""

    def __init__(
        self,
        message: str = "",
        keyid=None,
        keyname: Optional[str] = None,
        errmsg: str = "",
        returncode: Optional[int] = None,
        stderr: str = "",
        stdout: str = "",
    ):
        self.keyid = keyid
        self.keyname = keyname
        self.errmsg = errmsg
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        if not message:
            message = f"Operation on key {describe_key(keyid, keyname)} failed. ErrorMsg:{errmsg}"
        super().__init__(message)


class CommandExecutionError(KeyctlError):
    """The command could not be started or fed its input. No exit code exists."""

    def __init__(self, message: str = "", args: Sequence[str] = ()):
        self.command_args = list(args)
        super().__init__(message or f"Command '{' '.join(args)}' execution failed.")


class InvalidArgumentError(KeyctlError, ValueError):
    """Local misuse detected before keyctl is invoked."""
