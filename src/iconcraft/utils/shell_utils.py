import asyncio
import logging
import shlex
import shutil
from typing import List, Optional, Union

from iconcraft.errors import ToolError

logger = logging.getLogger(__name__)


class ShellUtils:
    """Runs external tools as asyncio child processes, bounded by a shared semaphore."""

    def __init__(self, max_jobs: Optional[int] = None):
        self.max_jobs = max_jobs
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._semaphore_loop = None

    @staticmethod
    def is_available(binary: str) -> bool:
        """Checks if a binary can be found in the system path."""
        return shutil.which(binary) is not None

    @staticmethod
    def to_argv(cmd: Union[str, List[str]]) -> List[str]:
        if isinstance(cmd, str):
            return shlex.split(cmd)
        return [str(part) for part in cmd]

    def _get_semaphore(self) -> Optional[asyncio.Semaphore]:
        # One semaphore per event loop; each asyncio.run() gets a fresh one
        if not self.max_jobs:
            return None
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.max_jobs)
            self._semaphore_loop = loop
        return self._semaphore

    async def run_command(self, cmd: Union[str, List[str]]) -> str:
        """
        Runs a command to completion and returns its stdout.
        Raises ToolError on a missing binary or non-zero exit.
        A cancelled call kills the child process before re-raising.
        """
        cmd_list = self.to_argv(cmd)
        if not cmd_list:
            raise ValueError("Empty command")

        semaphore = self._get_semaphore()
        if semaphore is None:
            return await self._execute(cmd_list)
        async with semaphore:
            return await self._execute(cmd_list)

    async def _execute(self, cmd_list: List[str]) -> str:
        logger.debug(f"Running: {shlex.join(cmd_list)}")
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd_list,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.error(f"Command not found: {cmd_list[0]}")
            raise ToolError(cmd_list, 127, f"Command '{cmd_list[0]}' not found.")

        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            if proc.returncode is None:
                logger.debug(f"Killing cancelled command: {cmd_list[0]} (pid {proc.pid})")
                proc.kill()
                await proc.wait()
            raise

        out = stdout.decode(errors="replace") if stdout else ""
        err = stderr.decode(errors="replace") if stderr else ""
        if proc.returncode != 0:
            logger.error(f"Command failed ({proc.returncode}): {shlex.join(cmd_list)}")
            if err:
                logger.error(f"STDERR: {err.strip()}")
            raise ToolError(cmd_list, proc.returncode, err or out)
        return out
