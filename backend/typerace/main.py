from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the typerace party server!'})


@main.route('/api/parties')
def list_parties():
    return jsonify(current_app.extensions['party_sessions'].list_parties())


@main.route('/api/parties/<string:room>')
def party_state(room):
    snapshot = current_app.extensions['party_sessions'].snapshot(room)
    if snapshot is None:
        return jsonify({'error': 'Party not found'}), 404
    return jsonify(snapshot)
