"""
Async process spawning with line-oriented output callbacks.

Used for the prerequisite installer and the native/shell launchers. Output is
read in chunks and split into lines, stdout and stderr in parallel, so a chatty
stderr never blocks a process that is waiting on stdout to drain.
"""
import codecs
import asyncio
import logging
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

TokenCallback = Callable[[str], None]


async def _pump_lines(stream: asyncio.StreamReader, on_token: Optional[TokenCallback]) -> None:
    """Forward every complete line of a stream to on_token"""
    # Characters may straddle two chunks
    decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
    buffer = ""
    while True:
        chunk = await stream.read(4096)
        if not chunk:
            buffer += decoder.decode(b"", final=True)
            break
        buffer += decoder.decode(chunk)
        lines = buffer.split('\n')
        buffer = lines[-1]  # Keep incomplete line
        for line in lines[:-1]:
            line = line.rstrip('\r')
            if line and on_token:
                on_token(line)
    if buffer.strip() and on_token:
        on_token(buffer.rstrip('\r'))


async def spawn(
    command: str,
    args: Optional[List[str]] = None,
    env: Optional[Dict[str, str]] = None,
    cwd: Optional[str] = None,
    on_token: Optional[TokenCallback] = None,
    on_err_token: Optional[TokenCallback] = None,
) -> int:
    """Run a command to completion.

    Args:
        command: Executable to run
        args: Arguments passed after the command
        env: Full environment for the child (None inherits ours)
        cwd: Working directory
        on_token: Called with each stdout line
        on_err_token: Called with each stderr line

    Returns:
        The exit code. Negative values mean the process was killed by a signal.

    Raises:
        OSError: if the process could not be started at all
    """
    cmd = [command] + list(args or [])
    logger.debug(f"[Spawn] Executing: {' '.join(cmd)}")

    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=env,
        cwd=cwd,
    )

    try:
        await asyncio.gather(
            _pump_lines(proc.stdout, on_token),
            _pump_lines(proc.stderr, on_err_token),
        )
        return await proc.wait()
    except asyncio.CancelledError:
        # Don't leave orphans behind when the caller goes away
        if proc.returncode is None:
            try:
                proc.terminate()
                await asyncio.wait_for(proc.wait(), timeout=5.0)
            except asyncio.TimeoutError:
                if proc.returncode is None:
                    proc.kill()
            except ProcessLookupError:
                pass
        raise
