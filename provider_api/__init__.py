"""
provider_api package: hosting provider API clients.

This package contains the contract and implementations used to authenticate against a hosting
provider, trigger a cache-management action on a server, and wait for the provider to finish
any asynchronous operation that action started. The rest of the application (the CLI) only
talks to the `ProviderClient` interface, so swapping the HTTP client for the in-memory mock
requires no other change.

Included modules:
- base: the abstract `ProviderClient` plus the polling loop and sequential flow shared by all
  implementations.
- cloudways_client: `CloudwaysClient`, the HTTP implementation for the Cloudways API.
- mock_client: `MockProviderClient`, a deterministic in-memory implementation.
- models: pydantic models for requests, results, and operation status.
- errors: the exception taxonomy raised by clients.
"""

from .base import ProviderClient
from .cloudways_client import CloudwaysClient
from .errors import (
    AuthenticationError,
    InvalidRequestError,
    OperationError,
    OperationTimeoutError,
    ProviderAPIError,
    UnexpectedResponseError,
)
from .mock_client import MockProviderClient
from .models import ActionRequest, ActionResult, Credentials, Operation, OperationStatus, VarnishAction

__version__ = "0.1.0"

__all__ = [
    "ProviderClient",
    "CloudwaysClient",
    "MockProviderClient",
    "ActionRequest",
    "ActionResult",
    "Credentials",
    "Operation",
    "OperationStatus",
    "VarnishAction",
    "ProviderAPIError",
    "AuthenticationError",
    "OperationError",
    "UnexpectedResponseError",
    "OperationTimeoutError",
    "InvalidRequestError",
]
