import logging

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

import config
from assignment import EmptyRosterError, get_owner_workload, parse_roster
from intake import TEST_TICKET, TicketValidationError, create_ticket_page
from notion_store import NotionStore, UpstreamQueryError

logger = logging.getLogger(__name__)

CREATED_MESSAGE = "I've informed the operations team, they're actively working on it."


def configure_logging(level: str = config.LOG_LEVEL):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )


def create_app(store=None, roster=None) -> Flask:
    """
    Build the relay application.
    The store and roster default to the environment configuration; tests pass their own.
    """
    app = Flask(__name__)
    CORS(app, origins=config.CORS_ORIGINS)

    store = store if store is not None else NotionStore()
    roster = list(roster) if roster is not None else parse_roster(config.OPS_ROSTER)
    app.config['STORE'] = store
    app.config['ROSTER'] = roster

    # ============ ERROR HANDLERS ============

    @app.errorhandler(TicketValidationError)
    def handle_validation_error(err):
        return jsonify({'ok': False, 'error': str(err)}), 400

    @app.errorhandler(EmptyRosterError)
    def handle_empty_roster(err):
        logger.error("[Assignment] %s", err)
        return jsonify({'ok': False, 'error': 'No owners configured', 'detail': str(err)}), 500

    @app.errorhandler(UpstreamQueryError)
    def handle_upstream_error(err):
        logger.error("[Notion Error] %s", err)
        return jsonify({'ok': False, 'error': 'Notion request failed', 'detail': err.detail or str(err)}), 502

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        if isinstance(err, HTTPException):
            return err
        logger.exception("[Server] Unhandled error")
        return jsonify({'ok': False, 'error': 'Internal error', 'detail': str(err)}), 500

    # ============ ROUTES ============

    @app.route('/health')
    def health():
        return jsonify({'ok': True, 'service': config.SERVICE_NAME})

    @app.route('/test-notion')
    def test_notion():
        """Verify the integration can read the ticket database."""
        if not store.is_configured():
            return jsonify({
                'ok': False,
                'error': 'Missing NOTION_TOKEN or DATABASE_ID environment variables'
            }), 400

        try:
            db = store.retrieve_database()
        except UpstreamQueryError as e:
            if e.status_code is None:
                raise
            logger.error("[Notion Error] %s", e)
            return jsonify({'ok': False, 'notion_error': e.detail}), e.status_code

        prop_names = list((db.get('properties') or {}).keys())
        return jsonify({
            'ok': True,
            'message': 'Notion connection verified and aligned.',
            'properties': prop_names,
            'categoryFieldOK': 'Category' in prop_names
        })

    @app.route('/api/create-test-ticket', methods=['POST'])
    def api_create_test_ticket():
        """Create the connectivity-test ticket."""
        result = create_ticket_page(store, roster, dict(TEST_TICKET), is_test=True)
        return jsonify({
            'ok': True,
            'notion_page_id': result['page'].get('id'),
            'assigned_to': result['assigned_to']
        })

    @app.route('/api/create-ticket', methods=['POST'])
    def api_create_ticket():
        """Create a ticket from the assistant's intake request."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        ticket = {
            'issueSummary': data.get('issueSummary'),
            'customer': data.get('customer'),
            'location': data.get('location') or data.get('customer'),
            'category': data.get('category'),
            'severity': data.get('severity'),
            'priority': data.get('priority'),
        }

        result = create_ticket_page(store, roster, ticket)
        return jsonify({
            'ok': True,
            'message': CREATED_MESSAGE,
            'notion_page_id': result['page'].get('id'),
            'assigned_to': result['assigned_to']
        })

    @app.route('/api/roster')
    def api_roster():
        """Get the operations roster in assignment order."""
        return jsonify({'ok': True, 'owners': [{'id': o.id, 'name': o.name} for o in roster]})

    @app.route('/api/workload')
    def api_workload():
        """Get live open-ticket counts per owner."""
        return jsonify({
            'ok': True,
            'cap': config.ASSIGNMENT_CAP,
            'owners': get_owner_workload(store, roster)
        })

    return app


if __name__ == '__main__':
    configure_logging()
    app = create_app()
    if not app.config['STORE'].is_configured():
        logger.warning("[Notion] NOTION_TOKEN or DATABASE_ID not set; ticket routes will fail")
    logger.info("[Server] %s listening on :%d", config.SERVICE_NAME, config.PORT)
    app.run(host='0.0.0.0', port=config.PORT)
