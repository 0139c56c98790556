"""
Shared fixtures: an in-memory stand-in for the keyctl command.

FakeKeyctl answers the same argv/stdin/exit-code contract as keyctl so the
suite never touches the real kernel keyring.
"""

import asyncio
import pytest
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from unittest.mock import patch

from keyctl_secrets import KeyringClient

NOT_FOUND = (1, b"", b"keyctl: Required key not available\n")


@dataclass
class FakeKey:
    name: str
    keytype: str
    data: bytes
    revoked: bool = False


def _hex_dump(data: bytes) -> bytes:
    """Render data like `keyctl read`: 4-byte groups, 32 bytes per line."""
    lines = [f"{len(data)} bytes of data in key:"]
    for start in range(0, len(data), 32):
        chunk = data[start:start + 32]
        groups = [chunk[i:i + 4].hex() for i in range(0, len(chunk), 4)]
        lines.append(" ".join(groups))
    return ("\n".join(lines) + "\n").encode()


class FakeStdin:
    def __init__(self):
        self.buffer = b""
        self.closed = False

    def write(self, data: bytes) -> None:
        self.buffer += data

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


class FakeProcess:
    def __init__(self, keyctl: "FakeKeyctl", args: Tuple[str, ...], stdin: Optional[FakeStdin]):
        self._keyctl = keyctl
        self._args = args
        self.stdin = stdin
        self.returncode: Optional[int] = None

    async def communicate(self, input=None):
        while self.stdin is not None and not self.stdin.closed:
            await asyncio.sleep(0)
        data = self.stdin.buffer if self.stdin is not None else None
        code, out, err = self._keyctl.handle(self._args, data)
        self.returncode = code
        return out, err

    async def wait(self):
        return self.returncode


class FakeKeyctl:
    """Minimal keyctl: keyrings hold ids, ids hold typed named payloads."""

    def __init__(self):
        self.keys: Dict[int, FakeKey] = {}
        self.keyrings: Dict[str, List[int]] = {}
        self.calls: List[List[str]] = []
        self.inputs: List[Optional[bytes]] = []
        self.failures: Dict[str, Tuple[int, bytes, bytes]] = {}
        self._next_id = 100000001

    async def spawn(self, *args, stdin=None, stdout=None, stderr=None):
        pipe = FakeStdin() if stdin == asyncio.subprocess.PIPE else None
        return FakeProcess(self, args, pipe)

    def fail(self, subcommand: str, code: int, stderr: str = "") -> None:
        """Make every call of a subcommand exit with `code`."""
        self.respond(subcommand, code, stderr=stderr)

    def respond(self, subcommand: str, code: int, stdout: str = "", stderr: str = "") -> None:
        """Answer every call of a subcommand with a fixed reply."""
        self.failures[subcommand] = (code, stdout.encode(), stderr.encode())

    def _live(self, keyid: str) -> Optional[FakeKey]:
        try:
            key = self.keys.get(int(keyid))
        except ValueError:
            return None
        if key is None or key.revoked:
            return None
        return key

    def handle(self, args, data: Optional[bytes]):
        argv = list(args)
        self.calls.append(argv)
        self.inputs.append(data)
        sub, rest = argv[1], argv[2:]

        if sub in self.failures:
            return self.failures[sub]

        if sub == "rlist":
            ids = self.keyrings.get(rest[0], [])
            out = " ".join(str(i) for i in ids)
            return 0, (out + "\n").encode() if out else b"", b""

        if sub == "search":
            keyring, keytype, name = rest
            for keyid in self.keyrings.get(keyring, []):
                key = self.keys[keyid]
                if not key.revoked and key.keytype == keytype and key.name == name:
                    return 0, f"{keyid}\n".encode(), b""
            return NOT_FOUND

        if sub == "rdescribe":
            key = self._live(rest[0])
            if key is None:
                return NOT_FOUND
            return 0, f"{key.keytype};1000;1000;3f010000;{key.name}\n".encode(), b""

        if sub == "pipe":
            key = self._live(rest[0])
            return NOT_FOUND if key is None else (0, key.data, b"")

        if sub == "read":
            key = self._live(rest[0])
            return NOT_FOUND if key is None else (0, _hex_dump(key.data), b"")

        if sub == "padd":
            keytype, name, keyring = rest
            keyid = self._next_id
            self._next_id += 1
            self.keys[keyid] = FakeKey(name, keytype, data or b"")
            self.keyrings.setdefault(keyring, []).append(keyid)
            return 0, f"{keyid}\n".encode(), b""

        if sub == "pupdate":
            key = self._live(rest[0])
            if key is None:
                return NOT_FOUND
            key.data = data or b""
            return 0, b"", b""

        if sub == "revoke":
            key = self._live(rest[0])
            if key is None:
                return NOT_FOUND
            key.revoked = True
            return 0, b"", b""

        if sub == "unlink":
            keyid, keyring = int(rest[0]), rest[1]
            ring = self.keyrings.get(keyring, [])
            if keyid not in ring:
                return 1, b"", b"keyctl_unlink: No such file or directory\n"
            ring.remove(keyid)
            return 0, b"1 links removed\n", b""

        if sub == "clear":
            self.keyrings[rest[0]] = []
            return 0, b"", b""

        return 2, b"", f"Unknown command: {sub}\n".encode()


@pytest.fixture
def fake_keyctl():
    """Route every subprocess spawn to a fresh FakeKeyctl."""
    fake = FakeKeyctl()
    with patch("asyncio.create_subprocess_exec", new=fake.spawn):
        yield fake


@pytest.fixture
def client(fake_keyctl):
    """Client bound to a disposable session keyring."""
    return KeyringClient(keyring="@s", keytype="user")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's config file and environment out of every test."""
    for name in ("KEYCTL_SECRETS_KEYRING", "KEYCTL_SECRETS_KEYTYPE", "KEYCTL_SECRETS_COMMAND"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("keyctl_secrets.config.CONFIG_PATH", tmp_path / "no-config.json")
