"""
Lightweight AWS SSM Parameter Store wrapper.

- cache: ``ParameterCache``, batched loading with a freshness window
- client: asyncio adapter over the boto3 SSM client
- config: settings via pydantic-settings
- logging: structured logging with trace correlation
- metrics: Prometheus metrics helpers
- errors: error types and responses
- retry: retry decorator for transient transport failures
"""

from .cache import ParameterCache
from .client import MAX_PARAMETERS_PER_REQUEST, GetParametersResult, Parameter, SSMClient
from .config import ParameterStoreSettings, get_settings
from .errors import (
    ExternalServiceError,
    ParameterNotFoundError,
    ParameterStoreException,
    ValidationError,
)
from .metrics import MetricsCollector

__version__ = "0.1.1"

__all__ = [
    "ParameterCache",
    "SSMClient",
    "Parameter",
    "GetParametersResult",
    "MAX_PARAMETERS_PER_REQUEST",
    "ParameterStoreSettings",
    "get_settings",
    "MetricsCollector",
    "ParameterStoreException",
    "ParameterNotFoundError",
    "ValidationError",
    "ExternalServiceError",
]
