"""Pytest configuration and fixtures"""

import os
import shutil
import stat
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from gitsmart.core.git import ExchangeResult, GitProcessBridge, Operation
from gitsmart.main import create_app

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable not available"
)
posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh scripts")


def git_env(home: Path) -> Dict[str, str]:
    """Environment isolating git from the user's own configuration"""
    env = os.environ.copy()
    env.update(
        {
            "HOME": str(home),
            "GIT_CONFIG_NOSYSTEM": "1",
            "GIT_TERMINAL_PROMPT": "0",
            "GIT_AUTHOR_NAME": "Test User",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test User",
            "GIT_COMMITTER_EMAIL": "test@example.com",
        }
    )
    return env


def run_git(*args: str, cwd: Path, env: Dict[str, str]) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        env=env,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout


class RecordingBridge(GitProcessBridge):
    """Bridge that records calls instead of spawning git"""

    def __init__(self, output: bytes = b"", advertisement: bytes = b""):
        super().__init__(git_binary="git-not-called")
        self.output = output
        self.advertisement = advertisement
        self.calls: List[tuple] = []

    def advertise(self, repo_path, operation: Operation) -> ExchangeResult:
        self.calls.append(("advertise", str(repo_path), operation, None))
        return ExchangeResult(operation=operation, exit_code=0, output=self.advertisement)

    def exchange(self, repo_path, operation: Operation, request_body: bytes) -> ExchangeResult:
        self.calls.append(("exchange", str(repo_path), operation, request_body))
        return ExchangeResult(operation=operation, exit_code=0, output=self.output)


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def env(home_dir: Path) -> Dict[str, str]:
    return git_env(home_dir)


@pytest.fixture
def bare_repo(tmp_path: Path, env: Dict[str, str]) -> Path:
    """Create an empty bare repository"""
    repo_path = tmp_path / "remote.git"
    run_git("init", "--bare", "--quiet", str(repo_path), cwd=tmp_path, env=env)
    run_git("symbolic-ref", "HEAD", "refs/heads/main", cwd=repo_path, env=env)
    return repo_path


@pytest.fixture
def populated_repo(tmp_path: Path, env: Dict[str, str]) -> Path:
    """Create a non-bare repository with two commits and a topic branch"""
    repo_path = tmp_path / "origin"
    repo_path.mkdir()
    run_git("init", "--quiet", cwd=repo_path, env=env)
    run_git("symbolic-ref", "HEAD", "refs/heads/main", cwd=repo_path, env=env)
    run_git("config", "receive.denyCurrentBranch", "updateInstead", cwd=repo_path, env=env)

    (repo_path / "hello.txt").write_text("hello")
    run_git("add", ".", cwd=repo_path, env=env)
    run_git("commit", "--quiet", "-m", "added hello", cwd=repo_path, env=env)

    (repo_path / "bye.txt").write_text("bye")
    run_git("add", ".", cwd=repo_path, env=env)
    run_git("commit", "--quiet", "-m", "added bye", cwd=repo_path, env=env)

    run_git("branch", "topic", cwd=repo_path, env=env)
    return repo_path


@pytest.fixture
def recording_bridge() -> RecordingBridge:
    return RecordingBridge(
        output=b"0008NAK\n",
        advertisement=b"003fabc refs/heads/main\n0000",
    )


def make_client(
    repository: Path,
    prefix: Optional[str] = None,
    bridge: Optional[GitProcessBridge] = None,
) -> TestClient:
    return TestClient(create_app({prefix: repository}, bridge=bridge or GitProcessBridge()))


@pytest.fixture
def client(populated_repo: Path) -> TestClient:
    """Test client serving the populated repository at the root"""
    return make_client(populated_repo)


@pytest.fixture
def fake_git(tmp_path: Path):
    """Write an executable shell script standing in for git"""

    def write(body: str) -> str:
        script = tmp_path / "fake-git"
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR)
        return str(script)

    return write
