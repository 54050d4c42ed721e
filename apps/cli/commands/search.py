import json

from apps.cli.utils import CONNECTION_ARGUMENTS, ENTITY_ARGUMENT, exit_on_error, get_search_client, load_entity
from esdata.console_reporter import ConsoleReporter
from esdata.query.criteria import where
from esdata.query.queries import CriteriaQuery, PageRequest, Sort

DEFINITION = {
    "name": "search",
    "description": "Search documents matching a field value",
    "arguments": [
        *CONNECTION_ARGUMENTS,
        ENTITY_ARGUMENT,
        {
            "name": "exact",
            "action": "store_true",
            "required": False,
            "help": "Match the value exactly instead of running a full-text match",
        },
        {
            "name": "field",
            "type": str,
            "required": True,
            "help": "Entity attribute to search on (dotted paths for nested models)",
        },
        {
            "name": "size",
            "type": int,
            "required": False,
            "default": 10,
            "help": "Number of hits to return (default: 10)",
        },
        {
            "name": "sort",
            "type": str,
            "required": False,
            "help": "Attribute to sort on; prefix with '-' for descending order",
        },
        {
            "name": "value",
            "type": str,
            "required": True,
            "help": "Value to search for",
        },
    ],
}


def main(
    *,
    assume_role: str | None = None,
    entity: str,
    exact: bool = False,
    field: str,
    index: str | None = None,
    password: str | None = None,
    profile: str | None = None,
    region: str | None = None,
    size: int = 10,
    sort: str | None = None,
    url: str = "http://localhost:9200",
    username: str | None = None,
    value: str,
) -> None:
    """
    Main entry point for the search command.

    Args:
        assume_role: AWS role to assume for signed requests
        entity: Entity class as module:Class
        exact: Match the value exactly instead of running a full-text match
        field: Entity attribute to search on
        index: Index name (default: derived from the entity)
        password: HTTP basic auth password
        profile: AWS profile to use
        region: AWS region; enables SigV4 signed requests
        size: Number of hits to return
        sort: Attribute to sort on, '-' prefix for descending
        url: Search service URL
        username: HTTP basic auth user name
        value: Value to search for
    """
    reporter = ConsoleReporter()

    with exit_on_error(reporter):
        entity_type = load_entity(entity)
        criteria = where(field).is_(value) if exact else where(field).matches(value)
        sorts = ()
        if sort:
            sorts = (Sort.desc(sort[1:]) if sort.startswith("-") else Sort.asc(sort),)
        query = CriteriaQuery(criteria=criteria, pageable=PageRequest(0, size), sort=sorts)

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
            hits = client.operations.search(query, entity_type, index=index)

        relation = "+" if hits.total_hits_relation == "gte" else ""
        reporter.on_message(f"Found {hits.total_hits}{relation} documents")
        for position, hit in enumerate(hits, 1):
            score = f"{hit.score:.3f}" if hit.score is not None else "-"
            reporter.on_message(
                f"{position}. [{score}] {hit.id}: {json.dumps(hit.content.model_dump(mode='json'))}"
            )
