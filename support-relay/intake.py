"""Ticket intake: field normalization and Notion page mapping."""
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

import config
from assignment import Owner, pick_next_assignee

logger = logging.getLogger(__name__)

VALID_CATEGORY = {'Hardware', 'Software', 'Payment', 'Network', 'Other'}
VALID_SEVERITY = {'S1', 'S2', 'S3', 'S4'}
VALID_PRIORITY = {'P1', 'P2', 'P3', 'P4'}

DEFAULT_CATEGORY = 'Other'
DEFAULT_SEVERITY = 'S3'
DEFAULT_PRIORITY = 'P3'

TEST_TICKET_TITLE = 'SWIFT Connection Test'
TEST_TICKET = {
    'issueSummary': TEST_TICKET_TITLE,
    'customer': 'System',
    'location': 'System',
    'category': 'Other',
    'severity': 'S4',
    'priority': 'P4',
}


class TicketValidationError(ValueError):
    """Raised when an intake request is missing required fields."""
    pass


def normalize_select(value, valid: set, fallback: str) -> str:
    """Return the trimmed value if it is one of the allowed options, else the fallback."""
    if not value or not isinstance(value, str):
        return fallback
    v = value.strip()
    return v if v in valid else fallback


def _text(content: str) -> list:
    return [{'type': 'text', 'text': {'content': content}}]


def build_page_properties(ticket: dict, assigned_id: str, is_test: bool = False,
                          now: Optional[datetime] = None, owner_property: Optional[str] = None) -> dict:
    """Map an intake request onto the ticket database's page properties."""
    summary = ticket.get('issueSummary') or ''
    customer = ticket.get('customer') or ''
    location = ticket.get('location') or customer
    cat = normalize_select(ticket.get('category'), VALID_CATEGORY, DEFAULT_CATEGORY)
    sev = normalize_select(ticket.get('severity'), VALID_SEVERITY, DEFAULT_SEVERITY)
    pri = normalize_select(ticket.get('priority'), VALID_PRIORITY, DEFAULT_PRIORITY)

    if is_test:
        title = TEST_TICKET_TITLE
        now = now or datetime.now(timezone.utc)
        report = f"Intake: Automated connectivity test @ {now.isoformat()}"
    else:
        title = summary or 'Issue'
        report = (f"Intake: Issue: {summary} | Customer: {customer} | Location: {location} | "
                  f"Category: {cat} | Severity: {sev} | Priority: {pri}")

    return {
        'Issue Title': {'title': _text(title)},
        'Customer/ Tenant': {'rich_text': _text(customer)},
        'Location': {'rich_text': _text(location)},
        'Category': {'select': {'name': cat}},
        'Severity': {'select': {'name': sev}},
        'Priority': {'select': {'name': pri}},
        'Status': {'select': {'name': 'To Do'}},
        'Customer informed': {'checkbox': False},
        'Maintenance Report': {'rich_text': _text(report)},
        (owner_property or config.NOTION_OWNER_PROPERTY): {'people': [{'id': assigned_id}]},
    }


def create_ticket_page(store, roster: Sequence[Owner], ticket: dict, is_test: bool = False,
                       cap: Optional[int] = None, fallback: Optional[str] = None) -> dict:
    """
    Full intake workflow:
    1. Validate the request
    2. Pick the assignee from live load
    3. Create the Notion page owned by them
    Returns {'page': <notion page>, 'assigned_to': <owner id>}
    """
    if not is_test and not ticket.get('issueSummary'):
        raise TicketValidationError('issueSummary is required')

    assigned_id = pick_next_assignee(
        store,
        roster,
        cap=config.ASSIGNMENT_CAP if cap is None else cap,
        fallback=fallback or config.ASSIGNMENT_FALLBACK
    )
    properties = build_page_properties(ticket, assigned_id, is_test=is_test, owner_property=store.owner_property)
    page = store.create_page(properties)

    logger.info("[Intake] Ticket %s created for %s", page.get('id'), assigned_id)
    return {'page': page, 'assigned_to': assigned_id}
