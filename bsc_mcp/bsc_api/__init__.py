"""JSON-RPC client wrappers for a BSC node."""

from .client import (
    BscApiError,
    BscRpcClient,
    DeploymentResult,
    DeploymentTimeoutError,
    ExecutionRevertedError,
    InsufficientFundsError,
    InvalidParamsError,
    NodeUnreachableError,
    NotFoundError,
    RateLimitedError,
    SignerUnavailableError,
    TokenBalance,
    UnauthorizedError,
    default_client,
)

__all__ = [
    "BscRpcClient",
    "BscApiError",
    "InvalidParamsError",
    "NotFoundError",
    "ExecutionRevertedError",
    "InsufficientFundsError",
    "RateLimitedError",
    "UnauthorizedError",
    "NodeUnreachableError",
    "SignerUnavailableError",
    "DeploymentTimeoutError",
    "DeploymentResult",
    "TokenBalance",
    "default_client",
]
