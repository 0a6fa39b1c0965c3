"""Desktop integration helpers."""

import asyncio
import sys
from pathlib import Path


def open_command(folder: Path | str, platform: str = sys.platform) -> list[str]:
    """Command line that opens ``folder`` in the platform file manager."""
    if platform == "darwin":
        return ["open", str(folder)]
    if platform == "win32":
        return ["cmd", "/c", "start", "", str(folder)]
    return ["xdg-open", str(folder)]


async def open_folder(folder: Path | str, platform: str = sys.platform) -> list[str]:
    """Open ``folder`` in the file manager and return the command used.

    Raises:
        OSError: If the opener command exits with a non-zero status
    """
    command = open_command(folder, platform)
    process = await asyncio.create_subprocess_exec(
        *command,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
    )
    code = await process.wait()
    if code != 0:
        raise OSError(f"Failed to open folder (exit {code})")
    return command
