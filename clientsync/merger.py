"""Join clients with their statuses."""

from typing import Any, Dict, Iterable, List

from .models import SENTINEL_STATUS, Client, EnrichedClient, StatusRecord


def merge(clients: Iterable[Client], statuses: Iterable[StatusRecord]) -> List[EnrichedClient]:
    """
    Attach a status to every client, in input order.

    The first status record with a client's id wins. Clients without a
    match, or whose matching record has an empty status, get "Unknown".
    """
    by_id: Dict[Any, StatusRecord] = {}
    for record in statuses:
        # setdefault keeps the earliest record for a repeated id
        by_id.setdefault(record.id, record)

    enriched = []
    for client in clients:
        match = by_id.get(client.id)
        status = match.status if match is not None and match.status else SENTINEL_STATUS
        enriched.append(EnrichedClient(client=client, status=status))
    return enriched
