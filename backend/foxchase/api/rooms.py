from flask import Blueprint, current_app, jsonify

rooms = Blueprint('rooms', __name__)


def _state(key):
    return current_app.extensions['foxchase'][key]


@rooms.route('/boards')
def list_boards():
    return jsonify({'boards': _state('catalog').names()})


@rooms.route('/rooms/<string:room_code>')
def room_state(room_code):
    """
    Returns the lobby view of a live room: state, owner and seat occupancy.
    """
    room = _state('registry').get(room_code)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(room.to_dict())
