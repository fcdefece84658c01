#!/usr/bin/env python3
"""
Questionnaire Graph Builder - JSON API for the visual editor

Features:
- Editing sessions holding one question graph each
- Question create/update/delete/reorder/copy
- Next/Yes/No connections checked by the connection rules
- Edge criteria limited to what the source question allows
- Import/export of the flat record format
- Layered layout coordinates for the graph view

Run:
    python3 web_editor.py

Then point the editor front end at: http://localhost:5001
"""

import logging
import secrets
import sys
import threading
from pathlib import Path

from flask import Flask, jsonify, request

sys.path.insert(0, str(Path(__file__).parent))

from qbuilder.config import BuilderSettings, load_dotenv
from qbuilder.criteria import Criterion, CriterionConfigError, UnknownCriterionLabel
from qbuilder.graph import QuestionNotFound
from qbuilder.records import ExportError, StructuralValidationError
from qbuilder.session import EditorSession, IllegalCriterion

load_dotenv(Path(__file__).resolve().parent / ".env")
settings = BuilderSettings.from_env()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("qbuilder.web")

app = Flask(__name__)
app.secret_key = secrets.token_hex(16)

# Store editing sessions per session_id
sessions = {}
sessions_lock = threading.Lock()


def _session_from(source):
    session_id = source.get('session_id') if source else None
    with sessions_lock:
        return sessions.get(session_id)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _parse_criteria(items):
    criteria = []
    for item in items or []:
        if not isinstance(item, dict):
            raise CriterionConfigError('Each criterion must be an object')
        if 'kind' in item:
            criteria.append(Criterion.of(item['kind'], item.get('config')))
        else:
            criteria.append(Criterion.from_wire(item.get('choice', ''), item.get('config')))
    return criteria


@app.errorhandler(QuestionNotFound)
def question_not_found(e):
    return jsonify({'error': f'Question not found: {e.args[0]}'}), 404


@app.route('/api/session', methods=['POST'])
def create_session():
    session_id = secrets.token_hex(8)
    with sessions_lock:
        sessions[session_id] = EditorSession(settings=settings)
    return jsonify({'session_id': session_id})


@app.route('/api/questions', methods=['GET'])
def list_questions():
    session = _session_from(request.args)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404
    return jsonify(session.graph.to_dict())


@app.route('/api/questions/add', methods=['POST'])
def add_question():
    data = _json_body()
    session = _session_from(data)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    try:
        question = session.add_question(
            text=data.get('text', 'New Question'),
            question_type=data.get('type', 'long_text'),
        )
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify(question.to_dict())


@app.route('/api/questions/update', methods=['POST'])
def update_question():
    data = _json_body()
    session = _session_from(data)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    changes = data.get('changes') or {}
    if not isinstance(changes, dict):
        return jsonify({'error': 'changes must be an object'}), 400
    if 'question_id' in changes:
        return jsonify({'error': 'question_id cannot be changed'}), 400

    try:
        question = session.update_question(data.get('question_id'), **changes)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify(question.to_dict())


@app.route('/api/questions/delete', methods=['POST'])
def delete_question():
    data = _json_body()
    session = _session_from(data)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    session.delete_question(data.get('question_id'))
    return jsonify({'deleted': True})


@app.route('/api/questions/move', methods=['POST'])
def move_question():
    data = _json_body()
    session = _session_from(data)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    try:
        moved = session.move_question(data.get('question_id'), data.get('direction', ''))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'moved': moved, 'order': session.graph.ids})


@app.route('/api/questions/copy', methods=['POST'])
def copy_question():
    data = _json_body()
    session = _session_from(data)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    question = session.copy_question(data.get('question_id'))
    return jsonify(question.to_dict())


@app.route('/api/questions/swap-titles', methods=['POST'])
def swap_titles():
    data = _json_body()
    session = _session_from(data)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    session.swap_titles(data.get('first_id'), data.get('second_id'))
    return jsonify({'swapped': True})


@app.route('/api/connect', methods=['POST'])
def connect():
    """Propose a Next/Yes/No edge between two questions."""
    data = _json_body()
    session = _session_from(data)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    try:
        verdict = session.connect(data.get('source'), data.get('target'), data.get('label', 'Next'))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    if not verdict.accepted:
        return jsonify({'accepted': False, 'error': verdict.reason}), 409
    return jsonify(verdict.to_dict())


@app.route('/api/disconnect', methods=['POST'])
def disconnect():
    data = _json_body()
    session = _session_from(data)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    try:
        session.disconnect(data.get('source'), data.get('label', 'Next'))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'disconnected': True})


@app.route('/api/edge/criteria', methods=['POST'])
def set_edge_criteria():
    data = _json_body()
    session = _session_from(data)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    try:
        criteria = session.set_edge_criteria(
            data.get('source'),
            data.get('label', 'Next'),
            _parse_criteria(data.get('criteria')),
        )
    except UnknownCriterionLabel as e:
        return jsonify({'error': f'Unknown criterion: {e.args[0]}'}), 400
    except (IllegalCriterion, ValueError) as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'criteria': [c.to_dict() for c in criteria]})


@app.route('/api/criteria', methods=['GET'])
def available_criteria():
    session = _session_from(request.args)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    return jsonify({'criteria': session.available_criteria_options(request.args.get('question_id'))})


@app.route('/api/import', methods=['POST'])
def import_graph():
    """Replace the session graph from exported records. Failures leave it untouched."""
    data = _json_body()
    session = _session_from(data)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    try:
        if 'text' in data:
            result = session.import_text(data['text'])
        else:
            result = session.import_records(data.get('records'))
    except StructuralValidationError as e:
        logger.info("Import rejected: %s", e)
        return jsonify({'error': str(e)}), 400

    return jsonify({
        'questions': len(result.graph),
        'edges': len(result.graph.edges()),
        'warnings': [w.to_dict() for w in result.warnings],
    })


@app.route('/api/export', methods=['GET'])
def export_graph():
    session = _session_from(request.args)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    try:
        records = session.export_records()
    except ExportError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify(records)


@app.route('/api/layout', methods=['GET'])
def layout_graph():
    session = _session_from(request.args)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    positions = session.layout()
    return jsonify({node: position.to_dict() for node, position in positions.items()})


if __name__ == '__main__':
    print(f"""
Questionnaire Graph Builder API

Open your editor against: http://localhost:{settings.port}

Press Ctrl+C to stop the server.
    """)

    app.run(debug=True, host=settings.host, port=settings.port)
