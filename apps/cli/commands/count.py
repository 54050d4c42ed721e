from apps.cli.utils import CONNECTION_ARGUMENTS, exit_on_error, get_search_client, load_entity
from esdata.console_reporter import ConsoleReporter
from esdata.query.criteria import where
from esdata.query.queries import CriteriaQuery

DEFINITION = {
    "name": "count",
    "description": "Count documents, optionally those with a field equal to a value",
    "arguments": [
        *CONNECTION_ARGUMENTS,
        {
            "name": "entity",
            "type": str,
            "required": False,
            "help": "Entity class as module:Class (required unless --index is given)",
        },
        {
            "name": "field",
            "type": str,
            "required": False,
            "help": "Only count documents where this field equals --value",
        },
        {
            "name": "value",
            "type": str,
            "required": False,
            "help": "Value compared with --field",
        },
    ],
}


def main(
    *,
    assume_role: str | None = None,
    entity: str | None = None,
    field: str | None = None,
    index: str | None = None,
    password: str | None = None,
    profile: str | None = None,
    region: str | None = None,
    url: str = "http://localhost:9200",
    username: str | None = None,
    value: str | None = None,
) -> None:
    """Main entry point for the count command."""
    reporter = ConsoleReporter()

    with exit_on_error(reporter):
        if (field is None) != (value is None):
            raise ValueError("--field and --value must be given together")
        entity_type = load_entity(entity) if entity else None
        query = CriteriaQuery(criteria=where(field).is_(value)) if field is not None else None

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
            total = client.operations.count(query, entity_type, index=index)

        reporter.on_message(str(total))
