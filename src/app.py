"""
Flask JSON API for the tournament bracket engine.
"""
import os
from flask import Flask, request, jsonify
from bracket_engine import TournamentEngine, TournamentError, YamlStore

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))
LOCK_TIMEOUT = float(os.environ.get('TOURNAMENT_LOCK_TIMEOUT', '10'))


def create_engine(data_dir: str = None, lock_timeout: float = None) -> TournamentEngine:
    """Build an engine backed by one YAML file per tournament."""
    store = YamlStore(data_dir or DATA_DIR, lock_timeout=lock_timeout or LOCK_TIMEOUT)
    return TournamentEngine(store)


def _engine() -> TournamentEngine:
    engine = app.config.get('ENGINE')
    if engine is None:
        engine = create_engine()
        app.config['ENGINE'] = engine
    return engine


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@app.errorhandler(TournamentError)
def handle_tournament_error(error):
    app.logger.warning(f'{request.method} {request.path} rejected: {type(error).__name__}: {error.message}')
    body = error.to_dict()
    body['retryable'] = error.retryable
    return jsonify(body), error.http_status


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List every stored tournament."""
    return jsonify({'tournaments': _engine().list_tournaments()})


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """Create a tournament in UPCOMING state with no draw."""
    data = _json_body()
    tournament_id = str(data.get('id', '')).strip()
    name = str(data.get('name', '')).strip()
    format = data.get('format')

    if not tournament_id or not name or not format:
        return jsonify({'error': 'Tournament id, name and format are required'}), 400
    if len(name) > 100:
        return jsonify({'error': 'Tournament name must be at most 100 characters'}), 400

    tournament = _engine().create_tournament(tournament_id, name, format)
    return jsonify({'tournament': tournament.summary()}), 201


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    tournament = _engine().get_tournament(tournament_id)
    return jsonify({
        'tournament': tournament.summary(),
        'participants': [p.to_dict() for p in tournament.participants],
    })


@app.route('/api/tournaments/<tournament_id>', methods=['DELETE'])
def api_delete_tournament(tournament_id):
    """Delete a tournament and all of its matches."""
    _engine().delete_tournament(tournament_id)
    return jsonify({'success': True})


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['POST'])
def api_build_bracket(tournament_id):
    """Build the draw from a roster: {'participants': [{'id', 'name', 'seed'}, ...]}."""
    data = _json_body()
    participants = data.get('participants')
    if not isinstance(participants, list):
        return jsonify({'error': 'participants must be a list'}), 400

    view = _engine().build_bracket(tournament_id, participants)
    return jsonify(view), 201


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['GET'])
def api_get_bracket(tournament_id):
    return jsonify(_engine().get_bracket_view(tournament_id))


@app.route('/api/tournaments/<tournament_id>/standings', methods=['GET'])
def api_get_standings(tournament_id):
    return jsonify({'standings': _engine().get_standings(tournament_id)})


@app.route('/api/tournaments/<tournament_id>/ready', methods=['GET'])
def api_ready_matches(tournament_id):
    """Match ids currently waiting for a result."""
    return jsonify({'ready_matches': _engine().get_ready_matches(tournament_id)})


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>/result', methods=['POST'])
def api_record_result(tournament_id, match_id):
    """Record a result: {'score1': int, 'score2': int}."""
    data = _json_body()
    if 'score1' not in data or 'score2' not in data:
        return jsonify({'error': 'Both scores must be provided'}), 400

    view = _engine().record_result(tournament_id, match_id, data['score1'], data['score2'])
    return jsonify(view)


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>/schedule', methods=['PATCH'])
def api_schedule_match(tournament_id, match_id):
    data = _json_body()
    if not data.get('scheduled_date'):
        return jsonify({'error': 'Missing scheduled_date'}), 400

    view = _engine().schedule_match(tournament_id, match_id,
                                    scheduled_date=data['scheduled_date'],
                                    court=data.get('court'))
    return jsonify(view)


@app.route('/api/tournaments/<tournament_id>/status', methods=['PATCH'])
def api_update_status(tournament_id):
    data = _json_body()
    status = data.get('status')
    if not status:
        return jsonify({'error': 'Missing status'}), 400

    tournament = _engine().transition_status(tournament_id, status)
    return jsonify({'tournament': tournament.summary()})


@app.route('/api/tournaments/<tournament_id>/stats/<participant_id>', methods=['GET'])
def api_player_stats(tournament_id, participant_id):
    return jsonify(_engine().get_player_stats(tournament_id, participant_id))


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
