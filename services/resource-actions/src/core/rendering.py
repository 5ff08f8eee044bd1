"""
Resource Actions - Output Rendering
===================================

Renders action listings as a table, JSON or YAML.
"""

import json

import yaml
from tabulate import tabulate

from shared.constants import OutputFormat
from shared.schemas import ActionRecord, ResourceKey

TABLE_HEADERS = ["GROUP", "KIND", "NAME", "ACTION", "AVAILABLE"]


def listing_to_dict(listing: dict[ResourceKey, list[ActionRecord]]) -> dict[str, list[dict]]:
    """Key each resource by "group\\tkind\\tname", sorted."""
    return {
        str(key): [action.model_dump() for action in listing[key]]
        for key in sorted(listing)
    }


def _table(listing: dict[ResourceKey, list[ActionRecord]]) -> str:
    rows = [
        [key.group, key.kind, key.name, action.name, str(action.available).lower()]
        for key in sorted(listing)
        for action in listing[key]
    ]
    return tabulate(rows, headers=TABLE_HEADERS, tablefmt="plain")


def render_action_listing(
    listing: dict[ResourceKey, list[ActionRecord]],
    output: OutputFormat = OutputFormat.TABLE
) -> str:
    """
    Render an action listing.

    Args:
        listing: Result of ActionDispatcher.list_actions
        output: TABLE, JSON or YAML

    Returns:
        Rendered text without a trailing newline
    """
    if output == OutputFormat.JSON:
        return json.dumps(listing_to_dict(listing), indent=2)
    if output == OutputFormat.YAML:
        return yaml.safe_dump(listing_to_dict(listing), default_flow_style=False).rstrip("\n")
    return _table(listing)
