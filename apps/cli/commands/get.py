from apps.cli.utils import CONNECTION_ARGUMENTS, ENTITY_ARGUMENT, exit_on_error, get_search_client, load_entity
from esdata.console_reporter import ConsoleReporter

DEFINITION = {
    "name": "get",
    "description": "Fetch a document by id",
    "arguments": [
        *CONNECTION_ARGUMENTS,
        ENTITY_ARGUMENT,
        {
            "name": "id",
            "type": str,
            "required": True,
            "help": "Document id",
        },
    ],
}


def main(
    *,
    assume_role: str | None = None,
    entity: str,
    id: str,  # noqa: A002
    index: str | None = None,
    password: str | None = None,
    profile: str | None = None,
    region: str | None = None,
    url: str = "http://localhost:9200",
    username: str | None = None,
) -> None:
    """Main entry point for the get command: print the entity as JSON, exit 1 when missing."""
    reporter = ConsoleReporter()

    with exit_on_error(reporter):
        entity_type = load_entity(entity)
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
            found = client.operations.get(id, entity_type, index=index)

        if found is None:
            raise ValueError(f"Document {id} not found")
        reporter.on_message(found.model_dump_json(indent=2))
