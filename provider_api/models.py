"""
Data models exchanged with the hosting provider API.

These pydantic models describe the small set of shapes the client sends and receives:
credentials for the token exchange, the action request body, the action result returned to
callers, and the operation status snapshot read while polling. All models are frozen, so every
call produces a fresh value instead of mutating an earlier one.

Validation is deliberately split: `ActionRequest` validates caller input before it hits the
wire, while `OperationStatus` is only applied by the completion waiter, so the raw status read
stays a plain decode of the provider's JSON.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator


class VarnishAction(str, Enum):
    """Varnish actions understood by the provider's `/service/varnish` endpoint."""

    ENABLE = "enable"
    DISABLE = "disable"
    PURGE = "purge"
    FLUSH_ALL = "flush_all"
    LIST_BACKENDS = "list_backends"


class Credentials(BaseModel):
    """
    Account credentials exchanged for a bearer token.

    The API key is a `SecretStr` so it is masked in reprs and log lines. Credentials are supplied
    by the caller for each session and never written anywhere.
    """

    model_config = ConfigDict(frozen=True)

    email: str = Field(..., min_length=1, description="Account email address")
    api_key: SecretStr = Field(..., description="Account API key")


class ActionRequest(BaseModel):
    """
    Body of an action submission: the target server and the action identifier.

    `server_id` accepts an integer or a string of decimal digits and is always serialized as an
    integer. Anything else (including booleans and strings such as "12abc") fails validation
    instead of producing a bogus id.
    """

    model_config = ConfigDict(frozen=True)

    server_id: int
    action: str = Field(..., min_length=1)

    @field_validator("server_id", mode="before")
    @classmethod
    def _coerce_server_id(cls, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError("server_id must be an integer, not a boolean")
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        raise ValueError(f"server_id must be an integer, got {value!r}")

    @field_validator("action", mode="before")
    @classmethod
    def _action_value(cls, value: Any) -> Any:
        if isinstance(value, VarnishAction):
            return value.value
        return value


class ActionResult(BaseModel):
    """
    Outcome of an action submission.

    Exactly one of the two forms is valid: an immediate completion (`completed=True`, no
    operation id) or a pending operation identified by `operation_id` that must be polled.
    """

    model_config = ConfigDict(frozen=True)

    completed: bool = False
    operation_id: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> "ActionResult":
        if self.completed == (self.operation_id is not None):
            raise ValueError("ActionResult must be either completed or carry one operation_id")
        return self

    @classmethod
    def immediate(cls) -> "ActionResult":
        return cls(completed=True)

    @classmethod
    def pending(cls, operation_id: Any) -> "ActionResult":
        return cls(operation_id=str(operation_id))


# Values of `is_completed` that mark a finished operation
COMPLETED_FLAGS = (True, 1, "1", "true", "yes")


class Operation(BaseModel):
    """
    An asynchronous unit of work on the provider side; extra provider fields are kept.

    Field types inside `operation` are not enforced, so no operation object is rejected:
    `is_completed` is true only for True, 1, "1", "true" or "yes" (case-insensitive) and false
    for anything else, including null and strings such as "pending". `message` is kept as sent.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    is_completed: bool = False
    message: Any = None

    @field_validator("is_completed", mode="before")
    @classmethod
    def _completed_flag(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            value = value.strip().lower()
        elif not isinstance(value, (int, float)):
            return False
        return value in COMPLETED_FLAGS


class OperationStatus(BaseModel):
    """Snapshot of a remote operation at poll time; `operation` may be missing entirely."""

    model_config = ConfigDict(frozen=True, extra="allow")

    operation: Optional[Operation] = None
