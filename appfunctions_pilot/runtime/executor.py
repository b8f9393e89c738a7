"""
AppFunctions Pilot - Function Executor
Invokes a declared function through the transport collaborator

Usage:
    ```python
    executor = FunctionExecutor(transport)

    result = await executor.execute(
        "com.example.tool",
        declaration,
        {"num1": 10, "num2": 6}
    )
    print(result.describe())  # 16
    ```
"""

import json
import logging
import time
from typing import Any, Dict, Mapping, Optional

from ..core.exceptions import (
    FunctionDisabledError,
    PilotException,
    TransportError,
)
from ..core.interfaces import (
    ExecuteError,
    ExecuteRequest,
    ExecuteSuccess,
    FunctionTransport,
    TransportErrorCode,
)
from ..core.schema import FunctionDeclaration, FunctionResult
from ..core.values import JsonValue
from .decoder import ResponseDecoder
from .encoder import ArgumentEncoder

logger = logging.getLogger(__name__)


class FunctionExecutor:
    """
    Function Executor

    Each execute() call is independent: encode, call, decode. The transport
    call is the only await, so cancelling a task stops it there; encoding has
    either finished or never started.

    Example:
        ```python
        result = await executor.execute(target, declaration, arguments)
        if result.success:
            print(result.result)
        else:
            print(result.error)
        ```
    """

    def __init__(self, transport: FunctionTransport, encoder: Optional[ArgumentEncoder] = None):
        """
        Initialize executor

        Args:
            transport: Collaborator performing the actual call
            encoder: Argument encoder (default: ArgumentEncoder())
        """
        self.transport = transport
        self.encoder = encoder or ArgumentEncoder()
        self._last_duration_ms = 0.0

    async def execute(
        self,
        target_package: str,
        declaration: FunctionDeclaration,
        arguments: Optional[Mapping[str, Any]],
    ) -> FunctionResult:
        """
        Execute a function and wrap the outcome

        Args:
            target_package: Package exposing the function
            declaration: Declaration snapshot to encode/decode with
            arguments: Parameter name -> loose value (None for no arguments)

        Returns:
            FunctionResult; failures carry the exception and its description
        """
        try:
            value = await self.execute_or_raise(target_package, declaration, arguments)
        except PilotException as e:
            logger.info("Function %s failed: %s", declaration.short_name, e.message)
            return FunctionResult.failure(e)
        return FunctionResult.ok(value)

    async def execute_or_raise(
        self,
        target_package: str,
        declaration: FunctionDeclaration,
        arguments: Optional[Mapping[str, Any]],
    ) -> JsonValue:
        """
        Execute a function and return its decoded result

        Raises:
            FunctionDisabledError: If the function is disabled for the target
            MarshallingException: If arguments or response cannot be (de)coded
            TransportError: If the transport reports (or raises) a failure
        """
        if logger.isEnabledFor(logging.INFO):
            logger.info("Function invoked: %s", json.dumps(declaration.to_json_dict()))
        start_time = time.perf_counter()

        try:
            enabled = await self.transport.is_function_enabled(target_package, declaration.name)
        except PilotException:
            raise
        except Exception as e:
            raise self._wrap_transport_failure(declaration, e)

        if not enabled:
            raise FunctionDisabledError(declaration.name, target_package)

        request = ExecuteRequest(
            target_package=target_package,
            function_identifier=declaration.name,
            function_parameters=self.encoder.encode(declaration.parameters, arguments),
        )

        try:
            response = await self.transport.execute_function(request)
        except PilotException:
            raise
        except Exception as e:
            raise self._wrap_transport_failure(declaration, e)
        finally:
            self._last_duration_ms = (time.perf_counter() - start_time) * 1000

        if isinstance(response, ExecuteError):
            raise TransportError(response.code, response.message, {"function": declaration.name})

        if not isinstance(response, ExecuteSuccess):
            raise TransportError(
                TransportErrorCode.APP_UNKNOWN_ERROR,
                f"Unexpected transport response: {type(response).__name__}",
                {"function": declaration.name}
            )

        return ResponseDecoder().decode(declaration.response, response.return_value)

    def get_execution_metadata(self) -> Dict[str, Any]:
        """
        Return observability metrics from last execution

        Returns:
            Dictionary with execution_duration_ms (time until the transport answered)
        """
        return {"execution_duration_ms": self._last_duration_ms}

    @staticmethod
    def _wrap_transport_failure(declaration: FunctionDeclaration, error: Exception) -> TransportError:
        wrapped = TransportError(
            TransportErrorCode.SYSTEM_ERROR,
            f"Execution failed for '{declaration.short_name}': {error}",
            {"function": declaration.name, "error": str(error)}
        )
        wrapped.__cause__ = error
        return wrapped


__all__ = ['FunctionExecutor']
