"""
Shared fixtures for the parameter cache tests.
"""

from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ssm_parameters.client import GetParametersResult
from ssm_parameters.config import get_settings


def make_result(values: Dict[str, str], requested: Optional[List[str]] = None) -> GetParametersResult:
    """Build a GetParameters result holding ``values``; other requested names are invalid."""
    requested = requested or list(values)
    return GetParametersResult.model_validate({
        "Parameters": [
            {"Name": name, "Type": "String", "Value": value}
            for name, value in values.items()
        ],
        "InvalidParameters": [name for name in requested if name not in values],
    })


class FakeParameterStore:
    """In-memory parameter store answering GetParameters like AWS does."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values = dict(values or {})
        self.get_parameters = AsyncMock(side_effect=self._get_parameters)

    async def _get_parameters(self, Names, WithDecryption=True):
        found = {name: self.values[name] for name in Names if name in self.values}
        return make_result(found, list(Names))

    @property
    def requested_names(self) -> List[List[str]]:
        return [call.kwargs["Names"] for call in self.get_parameters.call_args_list]


@pytest.fixture
def parameter_store():
    """Fake remote store seeded with a LogLevel parameter."""
    return FakeParameterStore({"/LogLevel": "INFO"})


@pytest.fixture
def mock_boto3_client():
    """Patch boto3 so no real SSM client is ever built."""
    with patch("ssm_parameters.client.boto3.client") as mock_factory:
        mock_factory.return_value = MagicMock()
        yield mock_factory


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
