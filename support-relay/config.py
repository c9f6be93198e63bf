"""
Configuration for the Support Relay.
Everything is read from environment variables; defaults suit local development.
"""
import os

# ============ Notion API ============
# Create an internal integration at https://www.notion.so/my-integrations
# and share the ticket database with it.
NOTION_TOKEN = os.getenv('NOTION_TOKEN', '')
DATABASE_ID = os.getenv('DATABASE_ID', '')
NOTION_API_URL = os.getenv('NOTION_API_URL', 'https://api.notion.com/v1')
NOTION_VERSION = os.getenv('NOTION_VERSION', '2022-06-28')
NOTION_TIMEOUT = float(os.getenv('NOTION_TIMEOUT', '30'))

# ============ Ticket Database Schema ============
NOTION_STATUS_PROPERTY = os.getenv('NOTION_STATUS_PROPERTY', 'Status')
NOTION_OWNER_PROPERTY = os.getenv('NOTION_OWNER_PROPERTY', 'Assigned To')
NOTION_DONE_STATUS = os.getenv('NOTION_DONE_STATUS', 'Done')

# ============ Operations Roster ============
# Order matters: it is the cap-check order and the rotation order.
# Override with OPS_ROSTER="<user-id>:<name>,<user-id>:<name>,..."
DEFAULT_ROSTER = (
    ('c0ccc544-c4c3-4a32-9d3b-23a500383b0b', 'Brazil'),
    ('080c42c6-fbb2-47d6-9774-1d086c7c3210', 'Nishanth'),
    ('ff3909f8-9fa8-4013-9d12-c1e86f8ebffe', 'Chethan'),
    ('ec6410cf-b2cb-4ea8-8539-fb973e00a028', 'Derrick'),
)
OPS_ROSTER = os.getenv('OPS_ROSTER', ','.join(f'{uid}:{name}' for uid, name in DEFAULT_ROSTER))

# ============ Assignment Policy ============
ASSIGNMENT_CAP = int(os.getenv('ASSIGNMENT_CAP', '2'))  # max open tickets before an owner is skipped
ASSIGNMENT_FALLBACK = os.getenv('ASSIGNMENT_FALLBACK', 'first').lower()  # 'first' or 'least_loaded'

# ============ Server ============
SERVICE_NAME = 'support-relay'
PORT = int(os.getenv('PORT', '3000'))


def parse_origins(raw: str):
    """'*' allows any origin; otherwise a comma-separated list of origins."""
    origins = [o.strip() for o in (raw or '').split(',') if o.strip()]
    if not origins or '*' in origins:
        return '*'
    return origins


CORS_ORIGINS = parse_origins(os.getenv('CORS_ORIGINS', '*'))
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
