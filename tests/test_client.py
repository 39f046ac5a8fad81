"""
Unit tests for the SSM client adapter.
"""

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoCredentialsError

from ssm_parameters.client import GetParametersResult, SSMClient
from ssm_parameters.errors import ExternalServiceError, ValidationError
from ssm_parameters.retry import RetryConfig


def no_delay(max_attempts: int = 3) -> RetryConfig:
    return RetryConfig(max_attempts=max_attempts, base_delay=0.0, jitter=False)


class TestSSMClient:
    """Test cases for SSMClient."""

    @pytest.fixture
    def boto_ssm(self, mock_boto3_client):
        """The mocked boto3 SSM client."""
        return mock_boto3_client.return_value

    @pytest.fixture
    def ssm_client(self, boto_ssm):
        return SSMClient({"region_name": "eu-west-1"}, retry_config=no_delay())

    def test_passes_configuration_to_boto3(self, mock_boto3_client):
        SSMClient({"region_name": "eu-west-1", "endpoint_url": "http://localhost:4566"})

        mock_boto3_client.assert_called_once_with(
            "ssm",
            region_name="eu-west-1",
            endpoint_url="http://localhost:4566",
        )

    def test_default_configuration(self, mock_boto3_client):
        client = SSMClient()

        mock_boto3_client.assert_called_once_with("ssm")
        assert client.retry_config.max_attempts == 3

    @pytest.mark.asyncio
    async def test_get_parameters_success(self, ssm_client, boto_ssm):
        boto_ssm.get_parameters.return_value = {
            "Parameters": [
                {"Name": "/Environment", "Type": "String", "Value": "DEV", "Version": 3},
                {"Name": "/Key", "Type": "SecureString", "Value": "12345"},
            ],
            "InvalidParameters": ["/Missing"],
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }

        result = await ssm_client.get_parameters(
            Names=["/Environment", "/Key", "/Missing"],
            WithDecryption=True,
        )

        boto_ssm.get_parameters.assert_called_once_with(
            Names=["/Environment", "/Key", "/Missing"],
            WithDecryption=True,
        )
        assert isinstance(result, GetParametersResult)
        assert [(p.name, p.value, p.type) for p in result.parameters] == [
            ("/Environment", "DEV", "String"),
            ("/Key", "12345", "SecureString"),
        ]
        assert result.parameters[0].version == 3
        assert result.invalid_parameters == ["/Missing"]

    @pytest.mark.asyncio
    async def test_with_decryption_forwarded(self, ssm_client, boto_ssm):
        boto_ssm.get_parameters.return_value = {"Parameters": []}

        await ssm_client.get_parameters(Names=["/Key"], WithDecryption=False)

        boto_ssm.get_parameters.assert_called_once_with(Names=["/Key"], WithDecryption=False)

    @pytest.mark.asyncio
    async def test_rejects_more_than_ten_names(self, ssm_client, boto_ssm):
        with pytest.raises(ValidationError) as exc_info:
            await ssm_client.get_parameters(Names=[f"/P{i}" for i in range(11)])

        assert exc_info.value.details == {"requested": 11}
        boto_ssm.get_parameters.assert_not_called()

    @pytest.mark.asyncio
    async def test_client_error_is_wrapped(self, ssm_client, boto_ssm):
        boto_ssm.get_parameters.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "not authorized"}},
            "GetParameters",
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            await ssm_client.get_parameters(Names=["/LogLevel"])

        assert exc_info.value.details["error_code"] == "AccessDeniedException"
        assert exc_info.value.message == "ssm: not authorized"
        assert boto_ssm.get_parameters.call_count == 1

    @pytest.mark.asyncio
    async def test_botocore_error_is_wrapped(self, ssm_client, boto_ssm):
        boto_ssm.get_parameters.side_effect = NoCredentialsError()

        with pytest.raises(ExternalServiceError):
            await ssm_client.get_parameters(Names=["/LogLevel"])

        assert boto_ssm.get_parameters.call_count == 1

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self, ssm_client, boto_ssm):
        boto_ssm.get_parameters.side_effect = [
            EndpointConnectionError(endpoint_url="https://ssm.eu-west-1.amazonaws.com"),
            {"Parameters": [{"Name": "/LogLevel", "Type": "String", "Value": "INFO"}]},
        ]

        result = await ssm_client.get_parameters(Names=["/LogLevel"])

        assert result.parameters[0].value == "INFO"
        assert boto_ssm.get_parameters.call_count == 2

    @pytest.mark.asyncio
    async def test_transient_error_exhausts_retries(self, boto_ssm):
        client = SSMClient(retry_config=no_delay(max_attempts=2))
        boto_ssm.get_parameters.side_effect = EndpointConnectionError(
            endpoint_url="https://ssm.eu-west-1.amazonaws.com"
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.get_parameters(Names=["/LogLevel"])

        assert exc_info.value.details["attempts"] == 2
        assert isinstance(exc_info.value.__cause__, EndpointConnectionError)
        assert boto_ssm.get_parameters.call_count == 2

    @pytest.mark.asyncio
    async def test_malformed_response(self, ssm_client, boto_ssm):
        boto_ssm.get_parameters.return_value = {"Parameters": [{"Value": "orphan"}]}

        with pytest.raises(ExternalServiceError) as exc_info:
            await ssm_client.get_parameters(Names=["/LogLevel"])

        assert "Malformed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_parameters_key_is_empty_result(self, ssm_client, boto_ssm):
        boto_ssm.get_parameters.return_value = {}

        result = await ssm_client.get_parameters(Names=["/LogLevel"])

        assert result.parameters == []
        assert result.invalid_parameters == []
