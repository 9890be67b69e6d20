"""Base class for external tool execution."""

from __future__ import annotations

import logging
import os
import re
import shlex
import shutil
import subprocess
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from packaging import version

from mudoger.config import ToolConfig
from mudoger.exceptions import ConfigurationError, DependencyError, ExternalToolError
from mudoger.utils.logging import LogTemplates, get_logger

_LIST_PLACEHOLDER = re.compile(r"^\{(\w+)\}$")


class ExternalTool:
    """Base class for external tool wrappers.

    Commands are built from the argv templates in :class:`ToolConfig`. When
    ``use_conda_run`` is set every command is prefixed with
    ``conda run -p <envs_path>/<environment>`` so tools installed in separate
    environments can be called without activating them.
    """

    tool_name: str = ""
    environment: str = ""
    required_version: Optional[str] = None
    version_command: Optional[str] = None
    version_regex: Optional[str] = r"(\d+\.\d+(?:\.\d+)*)"

    # Bioinformatics tools can run for hours or days; no timeout by default
    DEFAULT_TIMEOUT: Optional[int] = None

    def __init__(
        self,
        tools: Optional[ToolConfig] = None,
        threads: int = 1,
        logger: Optional[logging.Logger] = None,
    ):
        self.tools = tools or ToolConfig()
        self.threads = threads
        self.logger = logger or get_logger(f"external.{self.tool_name}")
        self._check_installation()

    # ---- environment -------------------------------------------------

    def env_prefix(self) -> Optional[Path]:
        if not self.tools.use_conda_run or not self.tools.envs_path:
            return None
        env_name = self.tools.environments.get(self.environment or self.tool_name, "")
        return Path(self.tools.envs_path) / env_name

    def launcher(self) -> List[str]:
        prefix = self.env_prefix()
        if prefix is None:
            return []
        return ["conda", "run", "--no-capture-output", "-p", str(prefix)]

    def process_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(self.tools.database_env())
        return env

    def check_tool_availability(self, tool_name: str) -> bool:
        prefix = self.env_prefix()
        if prefix is not None:
            return (prefix / "bin" / tool_name).exists()
        return shutil.which(tool_name) is not None

    def _check_installation(self) -> None:
        """Check that the tool is installed and meets version requirements."""
        if self.env_prefix() is not None and shutil.which("conda") is None:
            raise DependencyError("conda not found in PATH (required by tools.use_conda_run)")
        if not self.check_tool_availability(self.tool_name):
            where = f"in {self.env_prefix()}" if self.env_prefix() else "in PATH"
            raise DependencyError(f"{self.tool_name} not found {where}")

        if self.required_version:
            current_version = self.get_tool_version()
            if current_version and not self.check_minimum_version(
                current_version, self.required_version
            ):
                raise DependencyError(
                    f"{self.tool_name} version {current_version} is below "
                    f"required version {self.required_version}"
                )
            self.logger.debug(f"{self.tool_name} version: {current_version}")

    def get_tool_version(self) -> Optional[str]:
        if not self.version_command:
            return None
        cmd = self.launcher() + [self.tool_name, self.version_command]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False, timeout=60)
        except (subprocess.TimeoutExpired, OSError) as e:
            self.logger.debug(f"Could not get version for {self.tool_name}: {e}")
            return None
        output = result.stdout + result.stderr
        match = re.search(self.version_regex, output) if self.version_regex else None
        return match.group(1) if match else None

    def check_minimum_version(self, current_version: str, required_version: str) -> bool:
        """Check if current version meets the minimum requirement.

        Unparsable version strings are logged and accepted rather than
        blocking the run.
        """
        current_match = re.search(r"(\d+\.\d+(?:\.\d+)*)", current_version)
        required_match = re.search(r"(\d+\.\d+(?:\.\d+)*)", required_version)
        if not current_match or not required_match:
            self.logger.warning(
                f"Could not compare versions '{current_version}' and '{required_version}'. "
                "Please verify the tool version manually."
            )
            return True

        if version.parse(current_match.group(1)) < version.parse(required_match.group(1)):
            self.logger.warning(
                f"Version {current_version} is below minimum required {required_version}"
            )
            return False
        return True

    # ---- commands ----------------------------------------------------

    def build_command(self, key: str, **values: Any) -> List[str]:
        """Render the argv template ``key`` with ``values``."""
        try:
            template = self.tools.commands[key]
        except KeyError as exc:
            raise ConfigurationError(f"No command template configured for '{key}'") from exc

        values.setdefault("threads", self.threads)
        cmd: List[str] = []
        for token in shlex.split(template):
            whole = _LIST_PLACEHOLDER.match(token)
            if whole and isinstance(values.get(whole.group(1)), (list, tuple)):
                cmd.extend(str(v) for v in values[whole.group(1)])
                continue
            try:
                cmd.append(token.format_map(values))
            except (KeyError, IndexError) as exc:
                raise ConfigurationError(
                    f"Command template '{key}' uses unknown placeholder {exc}"
                ) from exc
        return self.launcher() + cmd

    def run(
        self,
        cmd: Sequence[str],
        cwd: Optional[Path] = None,
        log_file: Optional[Path] = None,
        check: bool = True,
        timeout: Optional[int] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> tuple[str, str]:
        """Execute ``cmd`` and return (stdout, stderr).

        When ``log_file`` is given the command line and its full output are
        appended to it.

        Raises:
            ExternalToolError: On a non-zero exit (with ``check``), a timeout or
                an OS error starting the process.
        """
        effective_timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        cmd_str = " ".join(shlex.quote(str(c)) for c in cmd)
        self.logger.info(LogTemplates.TOOL_START.format(tool_name=self.tool_name, description=cmd_str))
        process_env = self.process_env()
        if env:
            process_env.update(env)

        start = time.time()
        try:
            result = subprocess.run(
                [str(c) for c in cmd],
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
                timeout=effective_timeout,
                env=process_env,
            )
        except subprocess.TimeoutExpired:
            self.logger.error(f"Command timed out after {effective_timeout}s: {cmd_str}")
            raise ExternalToolError(
                f"{self.tool_name} timed out",
                command=list(cmd),
                returncode=-1,
                stderr=f"Process timed out after {effective_timeout} seconds",
                log_file=log_file,
            )
        except OSError as e:
            self.logger.error(f"OS error running command: {cmd_str}: {e}")
            raise ExternalToolError(
                f"Failed to execute {self.tool_name}",
                command=list(cmd),
                returncode=-1,
                stderr=str(e),
                log_file=log_file,
            )

        if log_file is not None:
            _append_log(log_file, cmd_str, result)

        if result.returncode != 0 and check:
            self.logger.error(
                LogTemplates.TOOL_FAILURE.format(tool_name=self.tool_name, exit_code=result.returncode)
            )
            raise ExternalToolError(
                f"{self.tool_name} failed",
                command=list(cmd),
                returncode=result.returncode,
                stderr=result.stderr,
                log_file=log_file,
            )

        self.logger.debug(
            LogTemplates.TOOL_SUCCESS.format(tool_name=self.tool_name, duration=time.time() - start)
        )
        return result.stdout, result.stderr


def _append_log(log_file: Path, cmd_str: str, result: subprocess.CompletedProcess) -> None:
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    with open(log_file, "a", encoding="utf-8") as handle:
        handle.write(f"$ {cmd_str}\n")
        handle.write(f"# exit code: {result.returncode}\n")
        if result.stdout:
            handle.write("--- stdout ---\n")
            handle.write(result.stdout.rstrip("\n") + "\n")
        if result.stderr:
            handle.write("--- stderr ---\n")
            handle.write(result.stderr.rstrip("\n") + "\n")
