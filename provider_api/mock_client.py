"""
Deterministic in-memory provider client for local runs, demos, and tests.

The mock implements the same `ProviderClient` contract as the HTTP client without any
credentials or network access. It accepts a single configured account, knows a fixed set of
servers, and can be told which actions should complete asynchronously. Asynchronous actions
return an operation id whose status flips to completed after a configurable number of status
reads, which makes the polling loop in `provider_api.base` easy to exercise with exact call
counts.
"""

from typing import Any, Dict, Iterable, Optional, TextIO

from .base import ProviderClient, build_action_request
from .errors import AuthenticationError, OperationError
from .models import ActionResult, VarnishAction


class MockProviderClient(ProviderClient):
    """
    In-memory `ProviderClient` with stable, inspectable behavior.

    Args:
        email (str): The only email accepted by `obtain_access_token`.
        api_key (str): The only API key accepted by `obtain_access_token`.
        server_ids (Iterable[int]): Servers that accept actions.
        async_actions (Iterable[str]): Actions that return an operation to poll instead of
            completing immediately.
        polls_until_complete (int): Status reads an operation needs before it reports completion.
        progress_stream (Optional[TextIO]): Where polling progress markers are written.
    """

    def __init__(
        self,
        email: str = "demo@example.com",
        api_key: str = "demo-key",
        server_ids: Iterable[int] = (1001, 1002),
        async_actions: Iterable[str] = (),
        polls_until_complete: int = 1,
        progress_stream: Optional[TextIO] = None,
    ) -> None:
        super().__init__(progress_stream=progress_stream)
        self._email = email
        self._api_key = api_key
        self._server_ids = set(server_ids)
        self._async_actions = {getattr(a, "value", a) for a in async_actions}
        self._polls_until_complete = polls_until_complete
        self._issued_tokens: set = set()
        self._operations: Dict[str, Dict[str, Any]] = {}
        self.status_reads = 0

    def obtain_access_token(self, email: str, api_key: str) -> str:
        if email != self._email or api_key != self._api_key:
            raise AuthenticationError(
                "Failed to obtain access token", {"error": "invalid_credentials"}
            )
        token = f"mock-token-{len(self._issued_tokens) + 1}"
        self._issued_tokens.add(token)
        return token

    def execute_action(self, token: str, server_id: Any, action: Any) -> ActionResult:
        request = build_action_request(server_id, action)
        self._check_token(token)

        if request.server_id not in self._server_ids:
            raise OperationError(
                f"Server {request.server_id} not found",
                {"status": False, "message": f"Server {request.server_id} not found"},
            )
        if request.action not in {a.value for a in VarnishAction}:
            raise OperationError(
                f"Unsupported action {request.action}",
                {"status": False, "message": f"Unsupported action {request.action}"},
            )

        if request.action in self._async_actions:
            operation_id = str(len(self._operations) + 1)
            self._operations[operation_id] = {"reads": 0, "server_id": request.server_id}
            return ActionResult.pending(operation_id)
        return ActionResult.immediate()

    def get_operation_status(self, token: str, operation_id: str) -> Dict[str, Any]:
        self._check_token(token)
        self.status_reads += 1

        state = self._operations.get(str(operation_id))
        if state is None:
            return {"error": "operation_not_found"}

        state["reads"] += 1
        done = state["reads"] >= self._polls_until_complete
        return {
            "operation": {
                "id": str(operation_id),
                "is_completed": done,
                "message": "Operation completed" if done else None,
            }
        }

    def _check_token(self, token: str) -> None:
        if token not in self._issued_tokens:
            raise AuthenticationError("Unknown or expired access token", {"error": "invalid_token"})
