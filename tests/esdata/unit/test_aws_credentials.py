"""Unit tests for get_aws_credentials."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from esdata.exceptions import ConfigurationError
from esdata.utils import get_aws_credentials


@pytest.mark.unit
class TestGetAwsCredentials:
    """Tests for get_aws_credentials."""

    @patch("esdata.utils.boto3.Session")
    def test_default_session(self, mock_session_class: MagicMock) -> None:
        credentials = MagicMock()
        mock_session_class.return_value.get_credentials.return_value = credentials

        assert get_aws_credentials() is credentials
        mock_session_class.assert_called_once_with()

    @patch("esdata.utils.boto3.Session")
    def test_profile(self, mock_session_class: MagicMock) -> None:
        get_aws_credentials(profile="dev")

        mock_session_class.assert_called_once_with(profile_name="dev")

    @patch("esdata.utils.boto3.Session")
    def test_missing_credentials_raise(self, mock_session_class: MagicMock) -> None:
        mock_session_class.return_value.get_credentials.return_value = None

        with pytest.raises(ConfigurationError, match="No AWS credentials found"):
            get_aws_credentials()

    @patch("esdata.utils.boto3.Session")
    def test_assume_role(self, mock_session_class: MagicMock) -> None:
        sts = mock_session_class.return_value.client.return_value
        sts.assume_role.return_value = {
            "Credentials": {"AccessKeyId": "AK", "SecretAccessKey": "SK", "SessionToken": "TK"}
        }

        credentials = get_aws_credentials(assume_role="arn:aws:iam::123:role/reader", region="eu-west-1")

        mock_session_class.return_value.client.assert_called_once_with("sts", region_name="eu-west-1")
        sts.assume_role.assert_called_once_with(RoleArn="arn:aws:iam::123:role/reader", RoleSessionName="esdata")
        assert (credentials.access_key, credentials.secret_key, credentials.token) == ("AK", "SK", "TK")

    @patch("esdata.utils.boto3.Session")
    def test_assume_role_failure(self, mock_session_class: MagicMock) -> None:
        sts = mock_session_class.return_value.client.return_value
        sts.assume_role.side_effect = ClientError({"Error": {"Code": "AccessDenied", "Message": "no"}}, "AssumeRole")

        with pytest.raises(ConfigurationError, match="Failed to assume role"):
            get_aws_credentials(assume_role="arn:aws:iam::123:role/reader")
