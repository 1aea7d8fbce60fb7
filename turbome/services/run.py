"""Subprocess helper for the git adapter."""

import asyncio
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# Keep git output stable for parsing and never block on a credential prompt.
_SUBPROCESS_ENV_OVERRIDES = {
    "LC_ALL": "C",
    "GIT_TERMINAL_PROMPT": "0",
}


async def run(
    args: list[str],
    cwd: Path | str,
    timeout: float | None = None,
) -> tuple[int, str, str]:
    """
    Run a command without a shell and collect its output.

    The arguments are passed to the process as a vector, so nothing in them is
    ever re-parsed by a shell.

    Args:
        args: Program and arguments, e.g. ``["git", "status"]``.
        cwd: Working directory for the process.
        timeout: Seconds to wait before the process is killed.

    Returns:
        A ``(return_code, stdout, stderr)`` tuple with decoded output.

    Raises:
        TimeoutError: If the process does not finish within ``timeout``.
        FileNotFoundError: If the program cannot be found.
    """
    env = {**os.environ, **_SUBPROCESS_ENV_OVERRIDES}
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=str(cwd),
        env=env,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        logger.warning(f"Command timed out after {timeout}s: {args[:3]}")
        raise TimeoutError(f"Command '{' '.join(args[:2])}' timed out after {timeout} seconds")

    return (
        process.returncode if process.returncode is not None else -1,
        stdout.decode("utf-8", errors="replace"),
        stderr.decode("utf-8", errors="replace"),
    )
