"""
Runs external tools with strict or lenient failure handling
"""

import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Any

from ..errors import CommandFailedError

# Exit code reported when the executable could not be found, as a shell would
COMMAND_NOT_FOUND = 127


class CommandRunner:
    """Runs commands with logging"""

    def __init__(self,
                 logger: Any,
                 dry_run: bool = False,
                 env: Optional[Dict[str, str]] = None):
        """
        Initialize command runner

        Args:
            logger: Logger instance
            dry_run: If True, log commands instead of running them
            env: Environment for child processes (defaults to inherited)
        """
        self.logger = logger
        self.dry_run = dry_run
        self.env = env

    @staticmethod
    def format_command(cmd: str, args: Sequence[str]) -> str:
        """Render a command line for logs"""
        parts = [cmd] + [str(a) for a in args]
        return " ".join(f'"{p}"' if " " in p else p for p in parts)

    def run(self,
            cmd: str,
            args: Sequence[str],
            cwd: Optional[Path] = None,
            strict: bool = True) -> int:
        """
        Run a command and wait for it

        Args:
            cmd: Executable name or path
            args: Arguments
            cwd: Working directory
            strict: Raise CommandFailedError on non-zero exit

        Returns:
            The exit code (always 0 for strict calls that return)
        """
        full_cmd: List[str] = [cmd] + [str(a) for a in args]
        cmd_str = self.format_command(cmd, args)
        self.logger.info(f"Running: {cmd_str}")
        if cwd is not None:
            self.logger.debug(f"  in: {cwd}")

        if self.dry_run:
            self.logger.info(f"[DRY RUN] Would run: {cmd_str}")
            return 0

        exit_code = self._execute(full_cmd, cwd)

        if exit_code != 0:
            if strict:
                self.logger.error(f"Command failed: {cmd_str}")
                raise CommandFailedError(exit_code, full_cmd)
            self.logger.debug(f"Command exited with {exit_code}: {cmd_str}")
        return exit_code

    def _execute(self, full_cmd: List[str], cwd: Optional[Path]) -> int:
        try:
            result = subprocess.run(
                full_cmd,
                cwd=str(cwd) if cwd is not None else None,
                env=self.env,
                check=False,
            )
        except FileNotFoundError:
            self.logger.error(f"{full_cmd[0]} not found in PATH")
            return COMMAND_NOT_FOUND
        return result.returncode


__all__ = ["CommandRunner", "COMMAND_NOT_FOUND"]
