"""Git-related type definitions"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from gitsmart.core.exceptions import UnrecognizedService

# Undecodable bytes survive a decode/encode round trip unchanged.
OUTPUT_ENCODING = "utf-8"
OUTPUT_ERRORS = "surrogateescape"


class Operation(str, Enum):
    """The two server-side operations of the smart HTTP protocol"""
    UPLOAD_PACK = "upload-pack"
    RECEIVE_PACK = "receive-pack"

    @classmethod
    def resolve(cls, token: Optional[str]) -> "Operation":
        """
        Map a client supplied service token to an operation

        Matching is exact; the table below is the complete accepted set.

        Raises:
            UnrecognizedService: token is missing or not in the table
        """
        try:
            return SERVICE_TOKENS[token]
        except (KeyError, TypeError):
            raise UnrecognizedService(token) from None

    @property
    def service_name(self) -> str:
        return f"git-{self.value}"

    def __str__(self) -> str:
        return self.value


SERVICE_TOKENS = {
    "upload-pack": Operation.UPLOAD_PACK,
    "git-upload-pack": Operation.UPLOAD_PACK,
    "receive-pack": Operation.RECEIVE_PACK,
    "git-receive-pack": Operation.RECEIVE_PACK,
}


@dataclass(frozen=True)
class ExchangeResult:
    """Output captured from one git child process"""
    operation: Operation
    exit_code: int
    output: bytes
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def lines(self) -> List[str]:
        # A trailing newline terminates the last line, it does not open a new one.
        text = self.output.decode(OUTPUT_ENCODING, errors=OUTPUT_ERRORS)
        if not text:
            return []
        lines = text.split("\n")
        if lines[-1] == "":
            lines.pop()
        return lines

    @property
    def text(self) -> str:
        return "\n".join(self.lines)
