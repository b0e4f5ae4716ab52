"""
Error taxonomy for SimpleStore.

Every error carries an ``exit_code`` that the CLI exits with. Only
``ConfigurationError`` is fatal; the rest are converted to state or
user-facing messages at the boundary where they occur.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Classified kind of a failed write."""

    USER_REJECTED = "user_rejected"
    REVERTED = "reverted"
    UNKNOWN = "unknown"


class SimpleStoreError(RuntimeError):
    exit_code: int = 1


class ConfigurationError(SimpleStoreError):
    exit_code = 2


class ValidationError(SimpleStoreError, ValueError):
    exit_code = 3

    def __init__(self, message: str, kind: str = "invalid_input") -> None:
        super().__init__(message)
        self.kind = kind


class NetworkMismatch(SimpleStoreError):
    exit_code = 4

    def __init__(self, chain_id: int, expected_chain_id: int) -> None:
        super().__init__(
            f"Wrong network: connected to chain {chain_id}, "
            f"expected {expected_chain_id}"
        )
        self.chain_id = chain_id
        self.expected_chain_id = expected_chain_id


class RemoteReadError(SimpleStoreError):
    exit_code = 5


class TransactionError(SimpleStoreError):
    exit_code = 6

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.reason = reason


class RpcError(SimpleStoreError):
    """JSON-RPC error payload or transport failure."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code


class UserRejectedRequestError(RpcError):
    """The wallet's signing prompt was declined."""

    def __init__(self, message: str = "User rejected the request.") -> None:
        super().__init__(message, code=4001)


class InvalidTransition(SimpleStoreError):
    pass
