from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from person_sync.crm_client import PipedriveClient
from person_sync.errors import InvalidResponseError
from person_sync.mapper import load_mappings, map_document, resolve_name

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    action: str  # "created" | "updated" | "skipped"
    name: str
    record: Dict[str, Any]
    person: Optional[Dict[str, Any]] = None

    @property
    def person_id(self) -> Any:
        return self.person.get("id") if self.person else None


def sync_person(
    document: Any,
    mappings: Any,
    client: PipedriveClient,
    dry_run: bool = False,
) -> SyncResult:
    """
    Map `document`, look the person up by name, then update the first match
    or create a new person. Validation runs before any request is made.
    With dry_run the search still happens but nothing is written.
    """
    table = load_mappings(mappings)
    record = map_document(document, table)
    name = resolve_name(document, table)

    logger.info("Searching for existing person with name: %s", name)
    existing = client.find_by_name(name)

    if dry_run:
        action = "would update" if existing else "would create"
        logger.info("Dry run: %s person %r", action, name)
        return SyncResult("skipped", name, record, existing)

    if existing:
        if existing.get("id") is None:
            raise InvalidResponseError("Invalid response structure during person search: match has no id")
        logger.info("Found existing person with ID: %s", existing.get("id"))
        person = client.update(existing["id"], record)
        logger.info("Successfully updated person with ID: %s", person.get("id"))
        return SyncResult("updated", name, record, person)

    logger.info("No existing person found, creating new person...")
    person = client.create(record)
    logger.info("Successfully created person with ID: %s", person.get("id"))
    return SyncResult("created", name, record, person)
