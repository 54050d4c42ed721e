import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from apps.cli.utils import CONNECTION_ARGUMENTS, ENTITY_ARGUMENT, exit_on_error, get_search_client, load_entity
from esdata.console_reporter import ConsoleReporter
from esdata.exceptions import MappingError
from esdata.mapping.mapper import EntityMapper

DEFINITION = {
    "name": "ingest",
    "description": "Bulk index a JSON lines file of entities",
    "arguments": [
        *CONNECTION_ARGUMENTS,
        ENTITY_ARGUMENT,
        {
            "name": "batch-size",
            "type": int,
            "required": False,
            "default": 500,
            "help": "Number of documents per bulk request (default: 500)",
        },
        {
            "name": "file",
            "type": str,
            "required": True,
            "help": "JSON lines file, one document per line",
        },
        {
            "name": "refresh",
            "action": "store_true",
            "required": False,
            "help": "Refresh the index once all documents are written",
        },
    ],
}


def read_entities(path: Path, entity_type: type, *, mapper: EntityMapper) -> Iterator[Any]:
    """
    Read entities from a JSON lines file. Blank lines are skipped.

    Raises:
        ValueError: If a line is not valid JSON or does not match the entity
    """
    with path.open(encoding="utf-8") as f:
        for line_number, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                document = json.loads(line)
                if not isinstance(document, dict):
                    raise ValueError(f"{path}:{line_number}: expected a JSON object, got {type(document).__name__}")
                yield mapper.from_document(document, entity_type, id=document.get("_id"))
            except (json.JSONDecodeError, MappingError) as e:
                raise ValueError(f"{path}:{line_number}: {e}") from e


def main(
    *,
    assume_role: str | None = None,
    batch_size: int = 500,
    entity: str,
    file: str,
    index: str | None = None,
    password: str | None = None,
    profile: str | None = None,
    refresh: bool = False,
    region: str | None = None,
    url: str = "http://localhost:9200",
    username: str | None = None,
) -> None:
    """
    Main entry point for the ingest command.

    Args:
        assume_role: AWS role to assume for signed requests
        batch_size: Number of documents per bulk request
        entity: Entity class as module:Class
        file: JSON lines file, one document per line
        index: Index name (default: derived from the entity)
        password: HTTP basic auth password
        profile: AWS profile to use
        refresh: Refresh the index once all documents are written
        region: AWS region; enables SigV4 signed requests
        url: Search service URL
        username: HTTP basic auth user name
    """
    reporter = ConsoleReporter(unit="batch", description="Ingesting")

    with exit_on_error(reporter):
        entity_type = load_entity(entity)
        path = Path(file)
        if not path.is_file():
            raise ValueError(f"File not found: {file}")
        if batch_size <= 0:
            raise ValueError("--batch-size must be positive")

        client = get_search_client(
            url=url,
            username=username,
            password=password,
            region=region,
            profile=profile,
            assume_role=assume_role,
            reporter=reporter,
        )
        with client:
            entities = list(read_entities(path, entity_type, mapper=client.mapper))
            reporter.on_message(f"Read {len(entities)} documents from {path.name}")
            ids = client.operations.save_all(
                entities, index=index, batch_size=batch_size, reporter=reporter
            )
            if refresh:
                client.operations.refresh(entity_type, index=index)

        reporter.on_message(f"Indexed {len(ids)} documents")
