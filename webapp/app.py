"""
Flask Application Factory

Creates the HTTP control surface for the price monitor: one-shot scrapes,
monitor start/pause/stop, status and price history.
"""

from datetime import datetime

from flask import Flask, jsonify, request

from config.settings import Settings
from monitoring.errors import PersistenceError, ProvisioningError, SessionError
from monitoring.models import CardIdentity
from monitoring.scheduler import PriceMonitor

# JSON keys accepted for each identity field (English first, then Portuguese)
CARD_KEYS = {
    "name": ("name", "nome"),
    "collection": ("collection", "colecao"),
    "number": ("number", "numero"),
}


def parse_cards(payload):
    """
    Parse the "cards" list of a JSON request body.

    Args:
        payload (dict): Decoded request body

    Returns:
        tuple: (cards, error_message); cards is None when the body is invalid
    """
    if not isinstance(payload, dict):
        return None, "Request body must be a JSON object"

    raw_cards = payload.get("cards")
    if not isinstance(raw_cards, list) or not raw_cards:
        return None, "No cards sent"

    cards = []
    for i, raw in enumerate(raw_cards):
        if not isinstance(raw, dict):
            return None, f"Card #{i + 1} must be an object"
        values = {}
        for field, keys in CARD_KEYS.items():
            values[field] = next((raw[k] for k in keys if raw.get(k)), "")
        try:
            cards.append(CardIdentity.create(**values))
        except ValueError as e:
            return None, f"Card #{i + 1}: {e}"
    return cards, None


def create_app(monitor=None, settings=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)

    settings = settings or (monitor.settings if monitor else Settings.from_env())
    monitor = monitor or PriceMonitor(settings)
    app.config['MONITOR'] = monitor

    def read_cards():
        payload = request.get_json(silent=True)
        if payload is None:
            return None, ({'status': 'error', 'message': 'Invalid JSON body'}, 400)
        cards, error = parse_cards(payload)
        if error:
            return None, ({'status': 'error', 'message': error}, 400)
        return cards, None

    @app.route('/ping')
    def ping():
        return 'pong'

    @app.route('/')
    def home():
        return 'Price monitor API running. Try /ping or /monitor/status.'

    @app.route('/scrape', methods=['POST'])
    def scrape():
        """Scrape the posted cards right away with a dedicated browser session."""
        cards, error_response = read_cards()
        if error_response:
            return error_response
        try:
            observations = monitor.scrape_once(cards)
        except (ProvisioningError, SessionError) as e:
            return {'status': 'error', 'message': str(e)}, 500
        return jsonify([obs.to_dict() for obs in observations])

    @app.route('/monitor', methods=['POST'])
    def start_monitor():
        cards, error_response = read_cards()
        if error_response:
            return error_response
        if not monitor.start(cards):
            return {'status': 'already_running', 'message': 'Monitor already running.'}, 409
        return {'status': 'started', 'cards': len(cards)}

    @app.route('/monitor/pause', methods=['POST'])
    def pause_monitor():
        new_state = monitor.toggle_pause()
        if new_state is None:
            return {'status': 'not_running', 'message': 'Monitor is not running.'}, 409
        return {'status': new_state.value}

    @app.route('/monitor/stop', methods=['GET', 'POST'])
    def stop_monitor():
        stopping = monitor.stop()
        return {'status': 'stopping' if stopping else monitor.state.value}

    @app.route('/monitor/status')
    def monitor_status():
        status = monitor.status()
        status['timestamp'] = datetime.now().isoformat()
        return status

    @app.route('/monitor/history')
    def monitor_history():
        return jsonify([record.to_dict() for record in monitor.history.records()])

    @app.route('/clean')
    def clean():
        """Delete the scrape result log."""
        try:
            monitor.result_log.clear()
        except PersistenceError as e:
            return {'status': 'error', 'message': str(e)}, 500
        return {'status': 'ok', 'message': 'Scrape history removed.'}

    return app
