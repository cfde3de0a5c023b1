"""Git command construction only"""
from pathlib import Path
from typing import List, Union

from .git_types import Operation


class GitCommandBuilder:
    """Builds argument lists for the stateless-rpc git services"""

    @staticmethod
    def service(
        operation: Operation,
        repo_path: Union[str, Path],
        advertise_refs: bool = False,
    ) -> List[str]:
        """
        Build an upload-pack or receive-pack command

        Args:
            operation: Service to run
            repo_path: Repository path, passed as an argument rather than cwd
            advertise_refs: Only advertise refs and exit

        Returns:
            Command arguments (without the git binary)
        """
        cmd = [operation.value, '--stateless-rpc']

        if advertise_refs:
            cmd.append('--advertise-refs')

        cmd.append(str(repo_path))

        return cmd

