"""Spawning git services and exchanging protocol bytes with them"""
import os
import subprocess
import time
from pathlib import Path
from typing import Dict, List, Optional, Type, Union

from gitsmart.core.exceptions import (AdvertisementFailed, ExchangeFailed,
                                      GitProcessFailed, ProcessStartFailed)
from gitsmart.infrastructure.logging import get_logger

from .command_builder import GitCommandBuilder
from .git_types import ExchangeResult, Operation

logger = get_logger(__name__)


class GitProcessBridge:
    """Runs one short-lived git child process per call"""

    def __init__(self, git_binary: str = 'git', timeout: Optional[float] = None):
        """
        Initialize bridge

        Args:
            git_binary: Path to git binary
            timeout: Seconds before a child is killed, None to wait forever
        """
        self.git_binary = git_binary
        self.timeout = timeout
        self.builder = GitCommandBuilder()

    def advertise(self, repo_path: Union[str, Path], operation: Operation) -> ExchangeResult:
        """
        Capture the ref advertisement of a repository

        Raises:
            ProcessStartFailed: git could not be launched
            AdvertisementFailed: git exited non-zero
        """
        args = self.builder.service(operation, repo_path, advertise_refs=True)
        return self._run(operation, args, None, AdvertisementFailed)

    def exchange(
        self,
        repo_path: Union[str, Path],
        operation: Operation,
        request_body: bytes,
    ) -> ExchangeResult:
        """
        Feed a request body to a stateless-rpc service and collect its reply

        The reply bytes are returned untouched.

        Raises:
            ProcessStartFailed: git could not be launched
            ExchangeFailed: git exited non-zero
        """
        args = self.builder.service(operation, repo_path)
        return self._run(operation, args, request_body, ExchangeFailed)

    def _environment(self) -> Dict[str, str]:
        env = os.environ.copy()
        env['GIT_TERMINAL_PROMPT'] = '0'
        return env

    def _run(
        self,
        operation: Operation,
        args: List[str],
        input_data: Optional[bytes],
        failure: Type[GitProcessFailed],
    ) -> ExchangeResult:
        cmd = [self.git_binary] + args
        start_time = time.time()

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE if input_data is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=self._environment(),
            )
        except OSError as e:
            logger.error("git_process_start_failed", command=cmd, error=str(e))
            raise ProcessStartFailed(self.git_binary, str(e)) from e

        logger.debug("git_process_started", command=cmd, pid=process.pid)

        # Popen's context exit closes every pipe and reaps the child.
        with process:
            try:
                stdout, stderr = process.communicate(input_data, timeout=self.timeout)
            except subprocess.TimeoutExpired:
                process.kill()
                process.communicate()
                logger.error(
                    "git_process_failed",
                    command=cmd,
                    reason="timeout",
                    timeout=self.timeout,
                )
                raise failure(
                    operation.value,
                    f"git {operation.value} timed out after {self.timeout} seconds",
                )
            except OSError as e:
                process.kill()
                logger.error("git_process_failed", command=cmd, reason="io", error=str(e))
                raise failure(operation.value, str(e)) from e

        result = ExchangeResult(
            operation=operation,
            exit_code=process.returncode,
            output=stdout,
            stderr=stderr.decode('utf-8', errors='replace'),
        )
        duration = time.time() - start_time

        if not result.success:
            logger.error(
                "git_process_failed",
                command=cmd,
                exit_code=result.exit_code,
                stderr=result.stderr,
                duration=duration,
            )
            raise failure(operation.value, result.stderr, result.exit_code)

        logger.info(
            "git_process_completed",
            operation=operation.value,
            exit_code=result.exit_code,
            output_size=len(result.output),
            duration=duration,
        )
        return result
