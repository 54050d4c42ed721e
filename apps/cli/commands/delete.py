from apps.cli.utils import CONNECTION_ARGUMENTS, exit_on_error, get_search_client, load_entity
from esdata.console_reporter import ConsoleReporter

DEFINITION = {
    "name": "delete",
    "description": "Delete a document by id",
    "arguments": [
        *CONNECTION_ARGUMENTS,
        {
            "name": "entity",
            "type": str,
            "required": False,
            "help": "Entity class as module:Class (required unless --index is given)",
        },
        {
            "name": "id",
            "type": str,
            "required": True,
            "help": "Document id",
        },
        {
            "name": "refresh",
            "action": "store_true",
            "required": False,
            "help": "Refresh the index so the deletion is visible immediately",
        },
    ],
}


def main(
    *,
    assume_role: str | None = None,
    entity: str | None = None,
    id: str,  # noqa: A002
    index: str | None = None,
    password: str | None = None,
    profile: str | None = None,
    refresh: bool = False,
    region: str | None = None,
    url: str = "http://localhost:9200",
    username: str | None = None,
) -> None:
    """Main entry point for the delete command."""
    reporter = ConsoleReporter()

    with exit_on_error(reporter):
        entity_type = load_entity(entity) if entity else None
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
            deleted_id = client.operations.delete(id, entity_type, index=index, refresh=refresh or None)

        reporter.on_message(f"Deleted document {deleted_id}")
