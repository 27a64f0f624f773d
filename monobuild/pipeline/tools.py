"""
Runs the external command-line tools behind the downgrade and optimizer stages.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import List

from ..core.exceptions import BuildError


logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    stdout: str
    stderr: str
    returncode: int


class ToolRunner:
    """Feeds source on stdin to a command and collects its stdout"""

    async def run(self, command: List[str], source: str) -> ToolResult:
        if not command:
            raise BuildError("No command configured for external tool")
        logger.debug(f"Running tool: {' '.join(command)}")
        try:
            process = await asyncio.create_subprocess_exec(
                command[0],
                *command[1:],
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise BuildError(f"Failed to start {command[0]}: {e}") from e

        stdout, stderr = await process.communicate(source.encode("utf-8"))
        result = ToolResult(
            stdout=stdout.decode("utf-8"),
            stderr=stderr.decode("utf-8"),
            returncode=process.returncode,
        )
        if result.returncode != 0:
            raise BuildError(
                f"{command[0]} exited with status {result.returncode}:\n{result.stderr.strip()}"
            )
        return result
