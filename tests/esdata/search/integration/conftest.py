"""Pytest fixtures for integration tests against a running search service.

The service is configured through the ESDATA_* environment variables read by
ClientConfig.from_env (at least ESDATA_URL). With ESDATA_AWS_REGION set, the
requests are signed with credentials from AWS_PROFILE / ASSUME_ROLE.
"""

import os
import uuid
from collections.abc import Iterator

import pytest
from botocore.credentials import Credentials

from esdata.config import ClientConfig
from esdata.null_reporter import NullReporter
from esdata.search.client import SearchClient
from esdata.utils import get_aws_credentials


@pytest.fixture(scope="session")
def client_config() -> ClientConfig:
    """Connection settings from the environment."""
    if not os.getenv("ESDATA_URL"):
        pytest.skip("ESDATA_URL environment variable is not set")
    return ClientConfig.from_env()


@pytest.fixture(scope="session")
def aws_credentials(client_config: ClientConfig) -> Credentials | None:
    """Credentials for signed requests, or None for plain HTTP."""
    if not client_config.aws_region:
        return None
    return get_aws_credentials(
        profile=os.getenv("AWS_PROFILE"),
        assume_role=os.getenv("ASSUME_ROLE"),
        region=client_config.aws_region,
        role_session_name="pytest-integration-test",
    )


@pytest.fixture(scope="module")
def search_client(client_config: ClientConfig, aws_credentials: Credentials | None) -> Iterator[SearchClient]:
    """
    Create a real SearchClient for integration tests.

    The connection is checked on construction, so an unreachable service
    fails the tests instead of skipping them.
    """
    client = SearchClient(config=client_config, credentials=aws_credentials, reporter=NullReporter())
    print(f"\n[Integration Test] Connected to {client_config.url}")

    yield client

    client.close()


@pytest.fixture
def index_name(search_client: SearchClient) -> Iterator[str]:
    """A unique index name; the index is deleted after the test."""
    name = f"test-esdata-{uuid.uuid4().hex[:8]}"

    yield name

    search_client.indexes.delete(index=name)
