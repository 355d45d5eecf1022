"""
Provider-agnostic client interface for hosting provider integrations.

This module defines the contract any concrete hosting provider client must fulfill: exchange
credentials for a bearer token, submit a side-effecting action against a server, and read the
status of an asynchronous operation. Those three calls are abstract because they depend on the
provider's HTTP contract. Everything built on top of them is provider-independent and lives
here as concrete methods:

- `wait_for_completion`: the bounded, fixed-interval polling loop that turns a fire-and-forget
  operation into a synchronous completion signal.
- `run_action`: the strictly sequential flow authenticate -> submit -> (if pending) wait.

Keeping the loop in the base class means the HTTP client and the in-memory mock share exactly
the same polling semantics, so tests written against the mock exercise production logic.

Key terms:
- Operation: asynchronous unit of work on the provider side, identified by an opaque id.
- Bearer token: short-lived credential presented on each authenticated request. Clients never
  store it; it is passed explicitly to every call.
"""

import logging
import sys
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TextIO, Union

from pydantic import ValidationError

from .errors import InvalidRequestError, OperationTimeoutError, UnexpectedResponseError
from .models import ActionRequest, ActionResult, Credentials, Operation, OperationStatus

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_INTERVAL_MS = 5000


def build_action_request(server_id: Any, action: Any) -> ActionRequest:
    """
    Validate caller input into an `ActionRequest`, failing before any network call.

    Args:
        server_id (Any): Integer id or a string of decimal digits.
        action (Any): Action identifier, a string or `VarnishAction`.

    Returns:
        ActionRequest: The validated request body.

    Raises:
        InvalidRequestError: If the server id is not an integer or the action is empty.
    """
    try:
        return ActionRequest(server_id=server_id, action=action)
    except ValidationError as exc:
        raise InvalidRequestError(f"Invalid action request: {exc}") from exc


class ProviderClient(ABC):
    """
    Abstract client defining the operations needed to drive a hosting provider action.

    Implementations handle authentication, HTTP transport, and translating raw responses into
    the models in `provider_api.models`. The polling loop and the sequential flow are provided
    here and rely only on the abstract methods.

    Args:
        progress_stream (Optional[TextIO]): Stream receiving one "." per unsuccessful poll.
            Defaults to stdout.
    """

    def __init__(self, progress_stream: Optional[TextIO] = None) -> None:
        self._progress_stream = progress_stream if progress_stream is not None else sys.stdout

    @abstractmethod
    def obtain_access_token(self, email: str, api_key: str) -> str:
        """
        Exchange account credentials for a bearer token.

        Args:
            email (str): Account email address.
            api_key (str): Account API key.

        Returns:
            str: The non-empty access token returned by the provider.

        Raises:
            AuthenticationError: If the provider did not return a token.
        """
        raise NotImplementedError

    @abstractmethod
    def execute_action(self, token: str, server_id: Any, action: Any) -> ActionResult:
        """
        Submit an action against a server.

        Args:
            token (str): Bearer token from `obtain_access_token`.
            server_id (Any): Target server id; coerced to an integer.
            action (Any): Action identifier, e.g. "flush_all".

        Returns:
            ActionResult: Immediate completion, or an operation id to poll.

        Raises:
            InvalidRequestError: If the request cannot be built from the inputs.
            OperationError: If the provider reports that the action failed.
            UnexpectedResponseError: If the response shape is not recognized.
        """
        raise NotImplementedError

    @abstractmethod
    def get_operation_status(self, token: str, operation_id: str) -> Dict[str, Any]:
        """
        Read the current status of an operation, returning the raw decoded body.

        No validation or retry happens here; `wait_for_completion` interprets the shape.
        """
        raise NotImplementedError

    def wait_for_completion(
        self,
        token: str,
        operation_id: str,
        max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
        interval_ms: Optional[int] = DEFAULT_INTERVAL_MS,
    ) -> Operation:
        """
        Poll an operation at a fixed interval until it completes or the attempt budget runs out.

        Each attempt sleeps `interval_ms` and then reads the status. The first status whose
        `operation.is_completed` is true ends the loop, so no further reads are made. A status
        that is not completed (any `is_completed` other than a true flag), or that has no
        `operation` field at all, counts as "still waiting": a progress marker is written and
        the next attempt starts. A missing
        `operation` is logged as a warning since it may hide an incompatible endpoint.

        Args:
            token (str): Bearer token.
            operation_id (str): Operation to watch.
            max_attempts (Optional[int]): Number of status reads before giving up. None means 30.
            interval_ms (Optional[int]): Delay before each read in milliseconds. None means 5000.

        Returns:
            Operation: The completed operation as reported by the provider.

        Raises:
            OperationTimeoutError: If no completed status was seen within `max_attempts` reads.
            UnexpectedResponseError: If a status body is not a JSON object of the expected shape.
            InvalidRequestError: If `max_attempts` or `interval_ms` is not a non-negative integer.
        """
        try:
            max_attempts = DEFAULT_MAX_ATTEMPTS if max_attempts is None else int(max_attempts)
            interval_ms = DEFAULT_INTERVAL_MS if interval_ms is None else int(interval_ms)
        except (TypeError, ValueError) as exc:
            raise InvalidRequestError(
                f"max_attempts and interval_ms must be integers "
                f"(got {max_attempts!r}, {interval_ms!r})"
            ) from exc
        if max_attempts < 0 or interval_ms < 0:
            raise InvalidRequestError(
                f"max_attempts and interval_ms must be non-negative "
                f"(got {max_attempts}, {interval_ms})"
            )

        logger.info(
            "Waiting for operation %s to complete (max %d attempts, every %d ms)",
            operation_id, max_attempts, interval_ms,
            extra={"operation_id": operation_id},
        )

        for attempt in range(1, max_attempts + 1):
            time.sleep(interval_ms / 1000.0)
            status = self._parse_status(operation_id, self.get_operation_status(token, operation_id))

            if status.operation is not None and status.operation.is_completed:
                logger.info(
                    "Operation %s completed on attempt %d", operation_id, attempt,
                    extra={"operation_id": operation_id},
                )
                return status.operation

            if status.operation is None:
                logger.warning(
                    "Status for operation %s has no 'operation' field (attempt %d); still waiting",
                    operation_id, attempt,
                    extra={"operation_id": operation_id},
                )
            self._emit_progress(".")

        self._emit_progress("\n")
        raise OperationTimeoutError(operation_id, max_attempts)

    def run_action(
        self,
        credentials: Credentials,
        server_id: Any,
        action: Any,
        max_attempts: Optional[int] = None,
        interval_ms: Optional[int] = None,
    ) -> Union[ActionResult, Operation]:
        """
        Authenticate, submit an action, and wait for it when the provider returns an operation.

        Returns:
            Union[ActionResult, Operation]: The immediate result, or the completed operation.
        """
        token = self.obtain_access_token(credentials.email, credentials.api_key.get_secret_value())
        result = self.execute_action(token, server_id, action)
        if result.completed:
            return result
        return self.wait_for_completion(token, result.operation_id, max_attempts, interval_ms)

    def _emit_progress(self, marker: str) -> None:
        self._progress_stream.write(marker)
        self._progress_stream.flush()

    @staticmethod
    def _parse_status(operation_id: str, raw: Any) -> OperationStatus:
        try:
            return OperationStatus.model_validate(raw)
        except ValidationError as exc:
            raise UnexpectedResponseError(
                f"Unexpected status response for operation {operation_id}: {raw!r}", raw
            ) from exc
