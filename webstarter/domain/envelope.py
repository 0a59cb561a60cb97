"""
The structured response envelope.

Every structured response body is a ``RestRespStruct``: a domain
``status``, a ``message`` and a ``data`` payload, plus optional business
error fields. Clients parse this shape regardless of whether the request
succeeded, failed in business logic or failed in the transport layer.
"""

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from webstarter.domain.status import StatusCode


def _now_millis() -> int:
    return int(time.time() * 1000)


class RestRespStruct(BaseModel):
    """Envelope serialized into every structured response.

    Attributes:
        status: Domain status code (see ``StatusCode``).
        message: Human-readable status message.
        data: Arbitrary payload for successful responses.
        biz_error_code: Business error code, set only for business errors.
        biz_error_message: Business error description.
        timestamp: Server time in epoch milliseconds.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: int
    message: str
    data: Any = None
    biz_error_code: int | None = Field(default=None, alias="bizErrorCode")
    biz_error_message: str | None = Field(default=None, alias="bizErrorMessage")
    timestamp: int = Field(default_factory=_now_millis)


def new_rest_status_error(status: StatusCode, message: str | None = None) -> RestRespStruct:
    """Build an envelope for a domain status with its default message."""
    return RestRespStruct(status=int(status), message=message or status.message)


def new_rest_success(data: Any = None) -> RestRespStruct:
    return RestRespStruct(
        status=int(StatusCode.SUCCESS),
        message=StatusCode.SUCCESS.message,
        data=data,
    )


def new_rest_exception(message: str | None = None) -> RestRespStruct:
    return new_rest_status_error(StatusCode.EXCEPTION, message)


def new_rest_bad_parameters(message: str | None = None) -> RestRespStruct:
    return new_rest_status_error(StatusCode.BAD_REQUEST_PARAMETERS, message)


def new_rest_unauthorized(message: str | None = None) -> RestRespStruct:
    return new_rest_status_error(StatusCode.UNAUTHORIZED, message)


def new_rest_biz_error(biz_error_code: int, biz_error_message: str) -> RestRespStruct:
    """Build a business error envelope.

    The request itself succeeded, so the domain status stays ``SUCCESS``;
    the failure is carried by the business error fields.
    """
    return RestRespStruct(
        status=int(StatusCode.SUCCESS),
        message=StatusCode.SUCCESS.message,
        biz_error_code=biz_error_code,
        biz_error_message=biz_error_message,
    )
