"""
Cached, batched access to AWS SSM Parameter Store values.
"""

import math
import time
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .client import MAX_PARAMETERS_PER_REQUEST, GetParametersResult, SSMClient
from .config import ParameterStoreSettings, get_settings
from .errors import ParameterNotFoundError, ValidationError
from .logging import get_logger
from .metrics import MetricsCollector

DEFAULT_WITH_DECRYPTION = True
DEFAULT_MAX_AGE_IN_SECONDS = 3600


class ParameterCache:
    """Load and cache parameters from the AWS SSM Parameter Store.

    ``parameters`` maps local aliases to parameter names on AWS::

        params = ParameterCache({"LogLevel": "/LogLevel"}, max_age=60)
        log_level = await params.get("LogLevel")

    Values are fetched on first use and served from memory while the last
    complete reload is at most ``max_age`` seconds old. ``max_age=0`` reloads
    on every call.

    Calls are coroutines but are not serialized: concurrent loads on the same
    instance may issue overlapping requests. Values converge and the freshness
    timestamp is set by the cycle that finishes last.
    """

    def __init__(
        self,
        parameters: Mapping[str, str],
        *,
        with_decryption: bool = DEFAULT_WITH_DECRYPTION,
        max_age: int = DEFAULT_MAX_AGE_IN_SECONDS,
        ssm_configuration: Optional[Mapping[str, Any]] = None,
        client: Optional[Any] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        if max_age < 0:
            raise ValidationError("max_age must not be negative", details={"max_age": max_age})

        self.logger = get_logger("ssm_parameters.cache")
        self.parameters: Mapping[str, str] = MappingProxyType(dict(parameters))
        self.with_decryption = with_decryption
        self.max_age = max_age
        self.metrics = metrics
        self.ssm_client = client if client is not None else SSMClient(ssm_configuration)

        self._values: Dict[str, Optional[str]] = {}
        self._loaded: Dict[str, bool] = {}
        for name in self.parameters.values():
            self._values[name] = None
            self._loaded[name] = False

        self._last_load_time: Optional[float] = None
        self._last_batch_count = 0

    @classmethod
    def from_settings(
        cls,
        parameters: Mapping[str, str],
        settings: Optional[ParameterStoreSettings] = None,
        **kwargs: Any,
    ) -> "ParameterCache":
        """Build a cache from ``SSM_PARAMETERS_*`` settings."""
        settings = settings or get_settings()
        ssm_configuration = {
            **settings.ssm_configuration(),
            **(kwargs.pop("ssm_configuration", None) or {}),
        }
        if "client" not in kwargs:
            kwargs["client"] = SSMClient(
                ssm_configuration,
                retry_config=settings.retry_config(),
            )
        kwargs.setdefault("with_decryption", settings.with_decryption)
        kwargs.setdefault("max_age", settings.max_age)
        return cls(parameters, **kwargs)

    @property
    def cache_age(self) -> Optional[int]:
        """Seconds since the last complete reload, or ``None`` if never loaded."""
        if self._last_load_time is None:
            return None
        # Half-up rounding, so 1.5s counts as 2s.
        return math.floor(time.monotonic() - self._last_load_time + 0.5)

    async def load(self, ignore_cache: bool = False) -> None:
        """Load parameters unless the cache is still fresh.

        The cache is fresh when the last complete reload is at most
        ``max_age`` seconds old (inclusive). ``ignore_cache`` forces a reload.
        """
        age = self.cache_age
        if age is None:
            age = self.max_age + 1
        self._record_gauge(age)

        if not ignore_cache and self.max_age and age <= self.max_age:
            self.logger.debug("Using cached parameters", cache_age=age, max_age=self.max_age)
            self._record_counter("parameter_cache_loads_total", result="hit")
            return

        self._record_counter("parameter_cache_loads_total", result="reload")
        for name in self._loaded:
            self._loaded[name] = False

        await self._load_parameters()

    reload = load

    async def get(self, key: str, ignore_cache: bool = False) -> Optional[str]:
        """Get a parameter value by alias.

        Returns ``None`` when the parameter does not exist on AWS.
        """
        if key not in self.parameters:
            raise ParameterNotFoundError(key)

        await self.load(ignore_cache=ignore_cache)
        return self._values[self.parameters[key]]

    async def get_all(self, ignore_cache: bool = False) -> Dict[str, Optional[str]]:
        """Get every configured parameter keyed by alias."""
        await self.load(ignore_cache=ignore_cache)
        return {key: self._values[name] for key, name in self.parameters.items()}

    def invalidate(self) -> None:
        """Force the next read to reload. Cached values remain readable."""
        self._last_load_time = None
        self.logger.info("Parameter cache invalidated")

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "parameters": len(self.parameters),
            "paths": len(self._values),
            "loaded": sum(1 for loaded in self._loaded.values() if loaded),
            "resolved": sum(1 for value in self._values.values() if value is not None),
            "max_age": self.max_age,
            "cache_age": self.cache_age,
            "last_batch_count": self._last_batch_count,
        }

    def _get_parameters_to_load(self) -> List[str]:
        """Names not loaded in the current cycle, at most one request's worth."""
        pending = [name for name, loaded in self._loaded.items() if not loaded]
        return pending[:MAX_PARAMETERS_PER_REQUEST]

    async def _load_parameters(self) -> None:
        """Fetch every not-loaded parameter in batches, then stamp the cache."""
        start = time.perf_counter()
        batches = 0
        self.logger.info("Reloading parameters", paths=len(self._loaded))

        names = self._get_parameters_to_load()
        while names:
            try:
                response = await self.ssm_client.get_parameters(
                    Names=names,
                    WithDecryption=self.with_decryption,
                )
            except Exception as exc:
                self.logger.error(
                    "Failed to load parameter batch",
                    names=names,
                    batch=batches + 1,
                    error=str(exc),
                )
                self._record_counter("parameter_batch_requests_total", status="error")
                raise

            batches += 1
            self._record_counter("parameter_batch_requests_total", status="success")
            if not isinstance(response, GetParametersResult):
                response = GetParametersResult.model_validate(response)
            self._store_batch(names, response)
            names = self._get_parameters_to_load()

        self._last_load_time = time.monotonic()
        self._last_batch_count = batches

        duration = time.perf_counter() - start
        self._record_histogram(duration)
        self.logger.info(
            "Parameters reloaded",
            batches=batches,
            paths=len(self._loaded),
            duration=round(duration, 3),
        )

    def _store_batch(self, names: List[str], response: GetParametersResult) -> None:
        """Store returned values and mark every requested name as loaded."""
        returned = set()
        for parameter in response.parameters:
            if parameter.name in self._values:
                self._values[parameter.name] = parameter.value
                returned.add(parameter.name)
        missing = [name for name in names if name not in returned]
        if missing:
            self.logger.warning(
                "Parameters not found in parameter store",
                names=missing,
                invalid=response.invalid_parameters,
            )
            self._record_counter("parameter_missing_total", amount=len(missing))

        for name in names:
            self._loaded[name] = True

        self.logger.debug(
            "Parameter batch loaded",
            requested=len(names),
            returned=len(returned),
        )

    def _record_counter(self, metric_name: str, amount: float = 1, **labels) -> None:
        if not self.metrics:
            return
        try:
            self.metrics.increment_counter(metric_name, amount, **labels)
        except Exception as exc:  # pragma: no cover
            self.logger.debug("Failed to record metric", metric=metric_name, error=str(exc))

    def _record_histogram(self, duration: float) -> None:
        if not self.metrics:
            return
        try:
            self.metrics.observe_histogram("parameter_reload_duration_seconds", duration)
        except Exception as exc:  # pragma: no cover
            self.logger.debug("Failed to record reload duration", error=str(exc))

    def _record_gauge(self, age: int) -> None:
        if not self.metrics or self._last_load_time is None:
            return
        try:
            self.metrics.set_gauge("parameter_cache_age_seconds", age)
        except Exception as exc:  # pragma: no cover
            self.logger.debug("Failed to record cache age", error=str(exc))
