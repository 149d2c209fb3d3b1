"""Async subprocess utilities.

Provides non-blocking subprocess execution for the pipeline stages. Every
external tool (docker, make, cosign, brew, SBOM generators) is started
through ``run_command`` so that failures surface uniformly and secrets passed
through stdin or the environment never show up in argument lists.

Example:
    >>> from release_conductor.utils.async_subprocess import run_command
    >>> stdout, stderr, code = await run_command("git", "status", cwd="/repo")
    >>> if code == 0:
    ...     print(stdout)
"""

import asyncio
import os
import subprocess
from collections.abc import Mapping
from pathlib import Path


async def run_command(
    *args: str,
    cwd: Path | str | None = None,
    check: bool = True,
    timeout: float | None = None,
    capture_output: bool = True,
    env: Mapping[str, str] | None = None,
    input: str | None = None,
) -> tuple[str, str, int]:
    """Run a command asynchronously without shell interpolation.

    Args:
        *args: Command and arguments as separate strings.
        cwd: Working directory for command execution.
        check: If True (default), raise CalledProcessError when the command
            returns a non-zero exit code.
        timeout: Maximum seconds to wait for completion. The process is killed
            and TimeoutError raised if exceeded. None waits indefinitely.
        capture_output: If True (default), capture stdout and stderr.
        env: Extra environment variables, merged over the parent environment.
        input: Text written to the process's standard input, then closed.

    Returns:
        Tuple of (stdout, stderr, return_code).

    Raises:
        subprocess.CalledProcessError: If check=True and command returns
            non-zero.
        TimeoutError: If timeout is exceeded.
        FileNotFoundError: If the command executable is not found.
    """
    process_env = None
    if env:
        process_env = {**os.environ, **env}

    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        env=process_env,
        stdin=asyncio.subprocess.PIPE if input is not None else None,
        stdout=asyncio.subprocess.PIPE if capture_output else None,
        stderr=asyncio.subprocess.PIPE if capture_output else None,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(input.encode("utf-8") if input is not None else None),
            timeout=timeout,
        )
    except TimeoutError:
        process.kill()
        await process.wait()
        raise

    stdout = (stdout_bytes or b"").decode("utf-8", errors="replace")
    stderr = (stderr_bytes or b"").decode("utf-8", errors="replace")

    if check and process.returncode != 0:
        raise subprocess.CalledProcessError(
            process.returncode,
            args,
            stdout,
            stderr,
        )

    return stdout, stderr, process.returncode or 0
