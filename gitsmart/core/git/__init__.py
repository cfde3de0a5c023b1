"""Git service core module"""
from .command_builder import GitCommandBuilder
from .command_executor import GitProcessBridge
from .git_types import SERVICE_TOKENS, ExchangeResult, Operation

__all__ = [
    'GitCommandBuilder',
    'GitProcessBridge',
    'ExchangeResult',
    'Operation',
    'SERVICE_TOKENS',
]
