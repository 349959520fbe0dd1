"""Request handling for semid operations."""

from semid.server.rpc import (
    DEFAULT_IDENTITY_NAME,
    REGISTER_IDENTITY,
    OperationHandler,
    RegisterIdentityParams,
    handle_rpc_request,
)

__all__ = [
    "DEFAULT_IDENTITY_NAME",
    "REGISTER_IDENTITY",
    "OperationHandler",
    "RegisterIdentityParams",
    "handle_rpc_request",
]
