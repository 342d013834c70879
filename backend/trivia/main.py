import uuid
from urllib.parse import quote

from flask import Blueprint, current_app, jsonify, redirect, request

main = Blueprint('main', __name__)


def _store():
    return current_app.extensions['trivia'].store


@main.route('/')
def index():
    store = _store()
    with store.lock:
        return jsonify({'sessions': store.summaries()})


@main.route('/create', methods=['POST'])
def create_session():
    """Pick a fresh session id and send the creator to its page."""
    data = request.get_json(silent=True) or request.form
    name = str(data.get('name') or '').strip() or 'Host'
    session_id = uuid.uuid4().hex[:current_app.config.get('SESSION_ID_LENGTH', 8)]
    return redirect(f"/session/{session_id}?name={quote(name)}&create=1")


@main.route('/session/<string:session_id>')
def session_page(session_id):
    store = _store()
    name = (request.args.get('name') or '').strip() or 'Player'
    with store.lock:
        session = store.get(session_id)
        players_count = len(session.players) if session else 0
    return jsonify({
        'sessionId': session_id,
        'name': name,
        'create': bool(request.args.get('create')),
        'sessionExists': session is not None,
        'playersCount': players_count,
    })


@main.route('/session/<string:session_id>/info')
def session_info(session_id):
    store = _store()
    with store.lock:
        session = store.get(session_id)
        if not session:
            return jsonify({'error': 'Session not found'}), 404
        return jsonify(session.summary())


@main.route('/api/check-session/<string:session_id>')
def check_session(session_id):
    return jsonify({'exists': session_id in _store()})
