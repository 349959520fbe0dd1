# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Semid Contributors

"""Operation dispatch for identity requests.

:class:`OperationHandler` validates an operation name and its parameters and
orchestrates derivation, identity creation and the registry update.
:func:`handle_rpc_request` wraps it in a JSON-RPC 2.0 envelope for whatever
transport delivers requests.

Supported operations:
    registerIdentity {name?: str, salt?: str} -> "0x<commitment>"
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

from ..core.exceptions import (
    InvalidParamsError,
    MethodNotFoundError,
    SemidException,
)
from ..core.logging import operation_log, request_scope
from ..identity.entropy import EntropyDeriver, SeedEntropySource
from ..identity.identity import IdentityFactory
from ..identity.registry import FileStateStore, Registry

logger = logging.getLogger(__name__)

REGISTER_IDENTITY = "registerIdentity"
DEFAULT_IDENTITY_NAME = "default"

JSONRPC_VERSION = "2.0"
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000


class RegisterIdentityParams(BaseModel):
    """Parameters of ``registerIdentity``. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    name: StrictStr | None = None
    salt: StrictStr | None = None


def parse_register_params(params: Any) -> RegisterIdentityParams:
    """Validate raw ``registerIdentity`` params.

    Raises:
        InvalidParamsError: If params is not an object or a field is not a
            string or null.
    """
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise InvalidParamsError("Params must be an object")
    try:
        return RegisterIdentityParams.model_validate(params)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise InvalidParamsError(
            f"Invalid params: {', '.join(fields)} must be a string or null",
            {"fields": fields},
        ) from e


class OperationHandler:
    """Entry point for identity operations.

    Example::

        handler = OperationHandler(
            deriver=EntropyDeriver(StaticEntropySource(b"\\x01" * 32)),
            factory=IdentityFactory(),
            registry=Registry(MemoryStateStore()),
        )
        commitment = await handler.handle("registerIdentity", {"name": "alice"})
    """

    def __init__(
        self,
        deriver: EntropyDeriver,
        factory: IdentityFactory,
        registry: Registry,
    ) -> None:
        self._deriver = deriver
        self._factory = factory
        self._registry = registry
        self._operations = {
            REGISTER_IDENTITY: self.register_identity,
        }

    @property
    def registry(self) -> Registry:
        return self._registry

    @classmethod
    def from_config(cls) -> OperationHandler:
        """Build a handler over the configured seed and state file."""
        from ..core.config import get_config

        config = get_config()
        return cls(
            deriver=EntropyDeriver(SeedEntropySource.from_config(), config.derivation_path),
            factory=IdentityFactory(),
            registry=Registry(FileStateStore.from_config()),
        )

    @property
    def operations(self) -> list[str]:
        return sorted(self._operations)

    async def handle(self, method: str, params: Any = None) -> Any:
        """Run ``method`` with ``params``.

        Raises:
            MethodNotFoundError: If ``method`` is not a known operation.
        """
        operation = self._operations.get(method)
        if operation is None:
            raise MethodNotFoundError(method)
        return await operation(params)

    async def register_identity(self, params: Any = None) -> str:
        """Derive, build and store the identity named in ``params``.

        Nothing is persisted unless every step before the registry write
        succeeds. Returns the identity commitment as ``0x`` hex.
        """
        parsed = parse_register_params(params)
        name = parsed.name or DEFAULT_IDENTITY_NAME

        entropy = await self._deriver.derive(parsed.salt)
        identity = self._factory.create(entropy)

        mapping = await self._registry.load()
        updated = Registry.put(mapping, name, identity.serialize())
        await self._registry.save(updated, expected=mapping)

        commitment = identity.commitment_hex
        logger.info("Registered identity %r (commitment %s)", name, commitment)
        return commitment


async def handle_rpc_request(
    request: Any,
    handler: OperationHandler,
) -> dict[str, Any] | None:
    """Handle a single JSON-RPC request.

    Args:
        request: The JSON-RPC request object
        handler: Handler executing the operation

    Returns:
        JSON-RPC response object, or None for notifications
    """
    if not isinstance(request, dict) or request.get("jsonrpc") != JSONRPC_VERSION:
        return _error_response(
            INVALID_REQUEST,
            "Invalid request: missing or wrong jsonrpc version",
            request.get("id") if isinstance(request, dict) else None,
        )

    method = request.get("method")
    params = request.get("params")
    request_id = request.get("id")

    # Notifications have no id
    is_notification = request_id is None

    if not method or not isinstance(method, str):
        return _error_response(INVALID_REQUEST, "Invalid Request: missing or invalid method", request_id)

    with request_scope():
        operation_log.started(method, params)
        start = time.perf_counter()
        try:
            result = await handler.handle(method, params)
        except MethodNotFoundError as e:
            logger.info("Rejected unknown operation %r", method)
            response = _error_response(METHOD_NOT_FOUND, e.message, request_id)
        except InvalidParamsError as e:
            logger.warning(f"Invalid params for {method}: {e.message}")
            response = _error_response(INVALID_PARAMS, e.message, request_id, e.to_dict())
        except SemidException as e:
            logger.error(f"{e.__class__.__name__} in {method}: {e.message}")
            response = _error_response(SERVER_ERROR, e.message, request_id, e.to_dict())
        except Exception:  # Intentionally broad: top-level operation handler
            logger.exception(f"Error in method {method}")
            response = _error_response(INTERNAL_ERROR, "Internal error", request_id)
        else:
            response = {"jsonrpc": JSONRPC_VERSION, "result": result, "id": request_id}
        finally:
            duration_ms = (time.perf_counter() - start) * 1000

        operation_log.finished(method, "result" in response, duration_ms)

    if is_notification:
        return None
    return response


def _error_response(
    code: int,
    message: str,
    request_id: Any,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "error": error, "id": request_id}
