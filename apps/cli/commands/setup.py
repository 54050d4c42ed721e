import sys

from apps.cli.utils import CONNECTION_ARGUMENTS, ENTITY_ARGUMENT, exit_on_error, get_search_client, load_entity
from esdata.console_reporter import ConsoleReporter
from esdata.interfaces import IReporter
from esdata.search.coordinates import resolve_coordinates

DEFINITION = {
    "name": "setup",
    "description": "Create the index of an entity with its settings and mapping",
    "arguments": [
        *CONNECTION_ARGUMENTS,
        ENTITY_ARGUMENT,
        {
            "name": "delete",
            "action": "store_true",
            "required": False,
            "help": "Delete existing index before setup",
        },
        {
            "name": "no-confirm",
            "action": "store_true",
            "required": False,
            "help": "Skip confirmation prompts",
        },
    ],
}


def confirm(prompt: str, *, reporter: IReporter) -> None:
    """Prompt user for confirmation."""
    confirmation = reporter.on_input(f"{prompt} (yes/no): ")
    if confirmation.lower() != "yes":
        reporter.on_message("Aborting...")
        sys.exit(0)


def main(
    *,
    assume_role: str | None = None,
    delete: bool = False,
    entity: str,
    index: str | None = None,
    no_confirm: bool = False,
    password: str | None = None,
    profile: str | None = None,
    region: str | None = None,
    url: str = "http://localhost:9200",
    username: str | None = None,
) -> None:
    """
    Main entry point for the setup command.

    Args:
        assume_role: AWS role to assume for signed requests
        delete: Delete existing index before setup
        entity: Entity class as module:Class
        index: Index name (default: derived from the entity)
        no_confirm: Skip confirmation prompts
        password: HTTP basic auth password
        profile: AWS profile to use
        region: AWS region; enables SigV4 signed requests
        url: Search service URL
        username: HTTP basic auth user name
    """
    reporter = ConsoleReporter()

    with exit_on_error(reporter):
        entity_type = load_entity(entity)
        index_name = resolve_coordinates(index, entity_type).index_name
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
            exists = client.indexes.exists(index=index_name)
            if exists and delete:
                if not no_confirm:
                    confirm(
                        f"\nAre you sure you want to permanently delete the existing '{index_name}' index and its content?",
                        reporter=reporter,
                    )
                client.indexes.delete(index=index_name)
                exists = False

            if exists:
                reporter.on_message(
                    f"Index {index_name} already exists, skipping. (use --delete to delete and recreate)"
                )
                return

            created = client.indexes.create_for(entity_type, index=index_name)
            reporter.on_message(
                f"Created index {created.name} with {len(created.mappings.properties)} mapped fields"
            )

        reporter.on_message("Setup completed successfully!")
