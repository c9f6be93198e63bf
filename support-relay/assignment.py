"""
Auto-assignment engine for routing tickets to the operations team.
Balances load by counting each owner's open tickets in the live database.

Decisions are recomputed from the store on every call. Two requests that
overlap may read the same counts and pick the same owner, briefly pushing
them past the cap; the store has no read-modify-write primitive to prevent it.
"""
import logging
from typing import Dict, Iterable, List, NamedTuple, Sequence

logger = logging.getLogger(__name__)

FALLBACK_FIRST = 'first'
FALLBACK_LEAST_LOADED = 'least_loaded'
FALLBACK_POLICIES = (FALLBACK_FIRST, FALLBACK_LEAST_LOADED)

DEFAULT_CAP = 2


class EmptyRosterError(ValueError):
    """Raised when there is nobody to assign a ticket to."""
    pass


class Owner(NamedTuple):
    id: str
    name: str


def parse_roster(raw: str) -> List[Owner]:
    """
    Parse "id:Name,id:Name" into an ordered roster.
    The name is optional and defaults to the id. Blank entries are skipped
    and a repeated id keeps its first position.
    """
    roster = []
    seen = set()
    for entry in (raw or '').split(','):
        entry = entry.strip()
        if not entry:
            continue
        owner_id, _, name = entry.partition(':')
        owner_id = owner_id.strip()
        if not owner_id or owner_id in seen:
            continue
        seen.add(owner_id)
        roster.append(Owner(owner_id, name.strip() or owner_id))
    return roster


def build_load_table(roster: Sequence[Owner], open_assigned_items: Iterable[dict]) -> Dict[str, int]:
    """Count open tickets per roster owner. Owners outside the roster are ignored."""
    counts = {owner.id: 0 for owner in roster}
    for item in open_assigned_items:
        owner_id = item.get('owner_id')
        if owner_id in counts:
            counts[owner_id] += 1
    return counts


def _check_policy(cap: int, fallback: str):
    if isinstance(cap, bool) or not isinstance(cap, int) or cap < 1:
        raise ValueError(f"Assignment cap must be a positive integer, got {cap!r}")
    if fallback not in FALLBACK_POLICIES:
        raise ValueError(f"Unknown fallback policy {fallback!r}, expected one of {FALLBACK_POLICIES}")


def _check_inputs(roster: Sequence[Owner], cap: int, fallback: str):
    if not roster:
        raise EmptyRosterError("Roster is empty; configure OPS_ROSTER")
    _check_policy(cap, fallback)


def _decide(roster: Sequence[Owner], open_assigned_items: Iterable[dict], cap: int, fallback: str):
    """Return (owner, counts, under_cap) for one assignment decision."""
    counts = build_load_table(roster, open_assigned_items)
    for owner in roster:
        if counts[owner.id] < cap:
            return owner, counts, True

    if fallback == FALLBACK_LEAST_LOADED:
        # min() keeps the first of equal counts, so roster order breaks ties
        return min(roster, key=lambda o: counts[o.id]), counts, False
    return roster[0], counts, False


def select_owner(roster: Sequence[Owner], open_assigned_items: Iterable[dict],
                 cap: int = DEFAULT_CAP, fallback: str = FALLBACK_FIRST) -> str:
    """
    Pick the owner for the next ticket.

    Scans the roster in order and returns the first owner holding fewer than
    `cap` open tickets. When everyone is at or above the cap the ticket still
    gets assigned: to the first owner ('first') or to the least loaded one
    ('least_loaded').
    """
    _check_inputs(roster, cap, fallback)
    owner, _, _ = _decide(roster, open_assigned_items, cap, fallback)
    return owner.id


def pick_next_assignee(store, roster: Sequence[Owner], cap: int = DEFAULT_CAP,
                       fallback: str = FALLBACK_FIRST) -> str:
    """
    Query the store for open tickets and pick who gets the next one.
    Store failures propagate; no owner is guessed without a fresh count.
    """
    _check_inputs(roster, cap, fallback)

    items = store.query_open_assigned_items()
    owner, counts, under_cap = _decide(roster, items, cap, fallback)

    if under_cap:
        logger.info("[Assignment] Assigning to %s (currently %d open)", owner.name, counts[owner.id])
    else:
        logger.info("[Assignment] All busy, assigning to %s by rotation", owner.name)
    return owner.id


def get_owner_workload(store, roster: Sequence[Owner]) -> List[dict]:
    """Get count of open tickets per owner, in roster order."""
    counts = build_load_table(roster, store.query_open_assigned_items())
    return [{'id': owner.id, 'name': owner.name, 'open': counts[owner.id]} for owner in roster]
