"""
Utility functions for the esdata CLI tool.
"""

import importlib
import sys
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel

from esdata.config import ClientConfig
from esdata.exceptions import ClientError, EsDataError
from esdata.interfaces import IReporter
from esdata.search.client import SearchClient
from esdata.utils import get_aws_credentials

CONNECTION_ARGUMENTS: list[dict[str, Any]] = [
    {
        "name": "assume-role",
        "type": str,
        "required": False,
        "help": "AWS role to assume for signed requests",
    },
    {
        "name": "index",
        "type": str,
        "required": False,
        "help": "Index name to use (default: derived from the entity)",
    },
    {
        "name": "password",
        "type": str,
        "required": False,
        "help": "HTTP basic auth password",
    },
    {
        "name": "profile",
        "type": str,
        "required": False,
        "help": "AWS profile to use",
    },
    {
        "name": "region",
        "type": str,
        "required": False,
        "help": "AWS region; enables SigV4 signed requests",
    },
    {
        "name": "url",
        "type": str,
        "required": False,
        "default": "http://localhost:9200",
        "help": "Search service URL (default: http://localhost:9200)",
    },
    {
        "name": "username",
        "type": str,
        "required": False,
        "help": "HTTP basic auth user name",
    },
]

ENTITY_ARGUMENT: dict[str, Any] = {
    "name": "entity",
    "type": str,
    "required": True,
    "help": "Entity class as module:Class (e.g. myapp.models:Book)",
}


def load_entity(path: str) -> type[BaseModel]:
    """
    Import an entity class from a "module:Class" path.

    Raises:
        ValueError: If the path is malformed or does not name a pydantic model
    """
    module_name, separator, class_name = path.partition(":")
    if not separator or not module_name or not class_name:
        raise ValueError(f"Entity must be given as module:Class, got '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import module '{module_name}': {e}") from e

    entity: Any = module
    for part in class_name.split("."):
        entity = getattr(entity, part, None)
        if entity is None:
            raise ValueError(f"Module '{module_name}' has no attribute '{class_name}'")
    if not (isinstance(entity, type) and issubclass(entity, BaseModel)):
        raise ValueError(f"'{path}' is not a pydantic model")
    return entity


def get_search_client(
    *,
    url: str = "http://localhost:9200",
    username: str | None = None,
    password: str | None = None,
    region: str | None = None,
    profile: str | None = None,
    assume_role: str | None = None,
    reporter: IReporter,
) -> SearchClient:
    """
    Create a SearchClient from command line options.

    AWS credentials are only resolved when a region is given.
    """
    config = ClientConfig(url=url, username=username, password=password, aws_region=region)
    credentials = None
    if region:
        credentials = get_aws_credentials(profile=profile, assume_role=assume_role, region=region)
    return SearchClient(config=config, reporter=reporter, credentials=credentials)


@contextmanager
def exit_on_error(reporter: IReporter) -> Iterator[None]:
    """Report errors raised by a command and exit with status 1."""
    try:
        yield
    except ValueError as e:
        reporter.on_message(f"Error: {e}")
        sys.exit(1)
    except ClientError as e:
        reporter.on_message(f"Search service error: {e}")
        sys.exit(1)
    except EsDataError as e:
        reporter.on_message(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        reporter.on_message(f"Unexpected error: {e}")
        reporter.on_message(traceback.format_exc())
        sys.exit(1)
