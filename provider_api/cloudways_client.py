"""
Cloudways API client over HTTP.

This module implements `ProviderClient` for the Cloudways REST API using `requests`. It speaks
three endpoints, all with JSON bodies:

- POST {base_url}/oauth/access_token   body {email, api_key}        -> {access_token}
- POST {base_url}/service/varnish      body {server_id, action}     -> {status, message?}
- GET  {base_url}/operation/{id}                                    -> {operation?: {...}}

The base URL is injected at construction so tests and staging setups never touch module state.
Each request is a single attempt with a transport timeout; connection errors and timeouts from
`requests` are not caught and reach the caller unchanged. Response bodies, not HTTP status
codes, decide success: the provider reports failures in the JSON body.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional, TextIO

import requests

from .base import ProviderClient, build_action_request
from .errors import AuthenticationError, OperationError, UnexpectedResponseError
from .models import ActionResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.cloudways.com/api/v1"
DEFAULT_TIMEOUT_S = 30.0


class CloudwaysClient(ProviderClient):
    """
    `ProviderClient` implementation for the Cloudways API.

    Args:
        base_url (str): API root, e.g. "https://api.cloudways.com/api/v1".
        timeout_s (float): Per-request transport timeout in seconds.
        progress_stream (Optional[TextIO]): Where polling progress markers are written.
    """

    TOKEN_PATH = "/oauth/access_token"
    ACTION_PATH = "/service/varnish"
    OPERATION_PATH = "/operation/{operation_id}"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        progress_stream: Optional[TextIO] = None,
    ) -> None:
        super().__init__(progress_stream=progress_stream)
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    @classmethod
    def from_config(cls, config: Mapping[str, Any], progress_stream: Optional[TextIO] = None) -> "CloudwaysClient":
        """
        Build a client from the application CONFIG mapping (`CONFIG["cloudways"]`).

        Missing keys fall back to the module defaults.
        """
        cw_cfg = config.get("cloudways", {}) or {}
        return cls(
            base_url=str(cw_cfg.get("base_url") or DEFAULT_BASE_URL),
            timeout_s=float(cw_cfg.get("request_timeout_s") or DEFAULT_TIMEOUT_S),
            progress_stream=progress_stream,
        )

    def obtain_access_token(self, email: str, api_key: str) -> str:
        """
        POST the credentials to the token endpoint and return the bearer token.

        A single attempt is made and the token is not cached.

        Args:
            email (str): Account email address.
            api_key (str): Account API key.

        Returns:
            str: The `access_token` value from the response body, unchanged.

        Raises:
            AuthenticationError: If the body is not JSON or has no non-empty `access_token`.
        """
        logger.info("Obtaining OAuth access token")
        response = requests.post(
            self._url(self.TOKEN_PATH),
            json={"email": email, "api_key": api_key},
            headers={"Content-Type": "application/json"},
            timeout=self.timeout_s,
        )
        data = self._decode(response, AuthenticationError, "token")

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError(f"Failed to obtain access token: {json.dumps(data)}", data)

        logger.info("Access token obtained")
        return token

    def execute_action(self, token: str, server_id: Any, action: Any) -> ActionResult:
        """
        Submit a Varnish action and interpret the provider's reply.

        Checks run in a fixed order so the explicit flags win over any other field:
        `status: false` fails with the provider message, `status: true` means the action was
        applied synchronously, and every other shape is a contract violation.
        """
        request = build_action_request(server_id, action)
        log_extra = {"server_id": request.server_id, "action": request.action}
        logger.info(
            "Executing Varnish %s on server %s", request.action, request.server_id, extra=log_extra
        )

        response = requests.post(
            self._url(self.ACTION_PATH),
            json=request.model_dump(),
            headers=self._auth_headers(token),
            timeout=self.timeout_s,
        )
        data = self._decode(response, UnexpectedResponseError, "action")
        logger.debug("Action response: %s", json.dumps(data), extra=log_extra)

        status = data.get("status") if isinstance(data, dict) else None
        if status is False:
            raise OperationError(data.get("message") or "Unknown error", data)
        if status is True:
            logger.info("Varnish %s completed successfully", request.action, extra=log_extra)
            return ActionResult.immediate()

        raise UnexpectedResponseError(f"Unexpected response: {json.dumps(data)}", data)

    def get_operation_status(self, token: str, operation_id: str) -> Dict[str, Any]:
        """
        GET the operation status and return the decoded body without validating it.

        Args:
            token (str): Bearer token.
            operation_id (str): Operation to read.

        Returns:
            Dict[str, Any]: The JSON body, normally `{"operation": {"is_completed": ..., ...}}`.

        Raises:
            UnexpectedResponseError: If the body is not JSON.
        """
        response = requests.get(
            self._url(self.OPERATION_PATH.format(operation_id=operation_id)),
            headers=self._auth_headers(token),
            timeout=self.timeout_s,
        )
        return self._decode(response, UnexpectedResponseError, "operation status")

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _auth_headers(token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _decode(response: requests.Response, error_cls: type, what: str) -> Any:
        # requests' JSONDecodeError subclasses ValueError
        try:
            return response.json()
        except ValueError as exc:
            body = response.text
            raise error_cls(
                f"Invalid JSON in {what} response (HTTP {response.status_code}): {body[:200]}",
                body,
            ) from exc
