__all__ = [
    # Configuration
    "Settings",
    "load_settings",
    # Errors
    "ErrorKind",
    "SimpleStoreError",
    "ConfigurationError",
    "ValidationError",
    "NetworkMismatch",
    "RemoteReadError",
    "TransactionError",
    "RpcError",
    "UserRejectedRequestError",
    "InvalidTransition",
    # Core
    "Connection",
    "RemoteValue",
    "PendingInput",
    "Transaction",
    "TxStatus",
    "NetworkGuard",
    "RemoteValueReader",
    "TransactionSubmitter",
    "PendingHandle",
    "TransactionLifecycleTracker",
    "ErrorClassifier",
    "ClassificationRule",
    "Notifier",
    "Notification",
    "NotificationKind",
    "StorageSession",
    # Chain / wallet
    "RpcClient",
    "SimpleStorageContract",
    "SIMPLE_STORAGE_ABI",
    "KeyStore",
    "LocalWallet",
]

from .config import Settings, load_settings
from .errors import (
    ConfigurationError,
    ErrorKind,
    InvalidTransition,
    NetworkMismatch,
    RemoteReadError,
    RpcError,
    SimpleStoreError,
    TransactionError,
    UserRejectedRequestError,
    ValidationError,
)
from .core.models import Connection, PendingInput, RemoteValue, Transaction, TxStatus
from .core.guard import NetworkGuard
from .core.notify import Notification, NotificationKind, Notifier
from .core.reader import RemoteValueReader
from .core.lifecycle import ClassificationRule, ErrorClassifier, TransactionLifecycleTracker
from .core.submitter import PendingHandle, TransactionSubmitter
from .core.session import StorageSession
from .chain.abi import SIMPLE_STORAGE_ABI
from .chain.rpc import RpcClient
from .chain.contract import SimpleStorageContract
from .wallet import KeyStore, LocalWallet
