"""
Shell execution utilities for keyctl-secrets.

One primitive, run_command, spawns a program, optionally feeds it stdin,
and returns (returncode, stdout, stderr). run_command_checked is the thin
wrapper that turns a non-zero exit into KeyctlOperationError.
"""

import asyncio
import logging
import shutil
from typing import NamedTuple, Optional, Sequence, Union

from .errors import CommandExecutionError, KeyctlOperationError

logger = logging.getLogger(__name__)

# Payload bytes that are not valid UTF-8 must survive a raw read unchanged
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"

Payload = Union[str, bytes]


class CommandResult(NamedTuple):
    """Outcome of a finished command."""
    returncode: int
    stdout: str
    stderr: str


def is_command_available(command: str) -> bool:
    """Check whether a program can be found on PATH."""
    return shutil.which(command) is not None


def _encode(data: Payload) -> bytes:
    if isinstance(data, bytes):
        return data
    return data.encode(ENCODING, ENCODING_ERRORS)


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode(ENCODING, ENCODING_ERRORS)


async def _feed_stdin(process, payload: bytes) -> None:
    """Write the whole payload, then close stdin to signal end of input."""
    try:
        process.stdin.write(payload)
        await process.stdin.drain()
    finally:
        process.stdin.close()


async def run_command(args: Sequence[str], data: Optional[Payload] = None) -> CommandResult:
    """
    Run a program to completion without inspecting its exit code.

    Args:
        args: Program followed by its arguments
        data: Optional stdin payload, written in full before stdin is closed

    Returns:
        CommandResult(returncode, stdout, stderr)

    Raises:
        CommandExecutionError: If the program cannot be started or fed its input
    """
    args = [str(arg) for arg in args]
    command_line = " ".join(args)
    logger.debug(f"Running: {command_line}")

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.PIPE if data is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise CommandExecutionError(
            f"Command '{command_line}' execution failed. ErrMsg:{e}", args
        ) from e

    if data is None:
        stdout, stderr = await process.communicate()
    else:
        # stdin is fed while communicate() drains stdout/stderr, so a child
        # that answers before reading all of its input cannot fill a pipe
        feed, output = await asyncio.gather(
            _feed_stdin(process, _encode(data)),
            process.communicate(),
            return_exceptions=True,
        )
        if isinstance(output, BaseException):
            raise output
        if isinstance(feed, (BrokenPipeError, ConnectionResetError)):
            raise CommandExecutionError(
                f"Command '{command_line}' execution failed. ErrMsg:{feed}", args
            ) from feed
        if isinstance(feed, BaseException):
            raise feed
        stdout, stderr = output

    result = CommandResult(process.returncode, _decode(stdout), _decode(stderr))

    if result.returncode != 0:
        logger.debug(f"Command exited with {result.returncode}: {command_line}")

    return result


async def run_command_checked(args: Sequence[str], data: Optional[Payload] = None) -> str:
    """
    Run a program and return its stdout, failing on a non-zero exit.

    Raises:
        KeyctlOperationError: Non-zero exit (code, stderr and stdout attached)
        CommandExecutionError: If the program cannot be started
    """
    code, out, err = await run_command(args, data)
    if code != 0:
        raise KeyctlOperationError(
            f"({code}){err} {out}",
            returncode=code,
            stderr=err,
            stdout=out,
        )
    return out
