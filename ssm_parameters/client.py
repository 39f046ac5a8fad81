"""
Asynchronous adapter around the boto3 SSM client.
"""

import asyncio
import functools
from typing import Any, Dict, List, Mapping, Optional, Sequence

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as ResponseValidationError

from .errors import ExternalServiceError, ValidationError
from .logging import get_logger
from .retry import RetryConfig, RetryError, retry_on_exception

# Per-call limit of GetParameters.
MAX_PARAMETERS_PER_REQUEST = 10

TRANSIENT_ERRORS = (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)


class Parameter(BaseModel):
    """One entry of a GetParameters response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(alias="Name")
    value: Optional[str] = Field(default=None, alias="Value")
    type: Optional[str] = Field(default=None, alias="Type")
    version: Optional[int] = Field(default=None, alias="Version")
    arn: Optional[str] = Field(default=None, alias="ARN")


class GetParametersResult(BaseModel):
    """Validated GetParameters response.

    Names unknown to the store are listed in ``invalid_parameters`` rather
    than raising.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    parameters: List[Parameter] = Field(default_factory=list, alias="Parameters")
    invalid_parameters: List[str] = Field(default_factory=list, alias="InvalidParameters")


class SSMClient:
    """Client for the AWS SSM Parameter Store."""

    def __init__(
        self,
        ssm_configuration: Optional[Mapping[str, Any]] = None,
        *,
        retry_config: Optional[RetryConfig] = None,
    ):
        self.logger = get_logger("ssm_parameters.client")
        self._client = boto3.client("ssm", **dict(ssm_configuration or {}))

        self.retry_config = retry_config or RetryConfig(
            max_attempts=3,
            base_delay=0.5,
            max_delay=5.0,
            exponential_base=2.0,
            jitter=True
        )
        self._request_with_retry = retry_on_exception(TRANSIENT_ERRORS, config=self.retry_config)(self._request)

    async def get_parameters(self, Names: Sequence[str], WithDecryption: bool = True) -> GetParametersResult:
        """Fetch up to ``MAX_PARAMETERS_PER_REQUEST`` parameters by name."""
        names = list(Names)
        if len(names) > MAX_PARAMETERS_PER_REQUEST:
            raise ValidationError(
                f"GetParameters accepts at most {MAX_PARAMETERS_PER_REQUEST} names",
                details={"requested": len(names)},
            )

        try:
            raw = await self._request_with_retry(names, WithDecryption)
        except RetryError as exc:
            raise ExternalServiceError(
                service="ssm",
                message=str(exc.last_exception),
                details={"names": names, "attempts": exc.attempts},
            ) from exc.last_exception
        except ClientError as exc:
            error = exc.response.get("Error", {})
            self.logger.error(
                "GetParameters request failed",
                names=names,
                error_code=error.get("Code"),
                error=str(exc),
            )
            raise ExternalServiceError(
                service="ssm",
                message=error.get("Message") or str(exc),
                details={"names": names, "error_code": error.get("Code")},
            ) from exc
        except BotoCoreError as exc:
            self.logger.error("GetParameters request failed", names=names, error=str(exc))
            raise ExternalServiceError(
                service="ssm",
                message=str(exc),
                details={"names": names},
            ) from exc

        try:
            return GetParametersResult.model_validate(raw)
        except ResponseValidationError as exc:
            raise ExternalServiceError(
                service="ssm",
                message="Malformed GetParameters response",
                details={"names": names, "errors": exc.errors()},
            ) from exc

    async def _request(self, names: List[str], with_decryption: bool) -> Dict[str, Any]:
        """Run the blocking boto3 call in the default executor."""
        loop = asyncio.get_running_loop()
        call = functools.partial(
            self._client.get_parameters,
            Names=names,
            WithDecryption=with_decryption,
        )
        return await loop.run_in_executor(None, call)
