from flask import current_app, request
from flask_socketio import join_room, leave_room

from foxchase import socketio
from foxchase.services.games import Broadcaster, RANDOM_BOARD

NAMESPACE = '/ws'


def room_group(room_code: str) -> str:
    return f"room:{room_code}"


class SocketIOChannel(Broadcaster):
    """Broadcaster backed by the Flask-SocketIO server."""

    def __init__(self, sio, namespace: str = NAMESPACE):
        self.sio = sio
        self.namespace = namespace

    def send(self, connection, event, payload):
        self.sio.emit(event, payload, to=connection, namespace=self.namespace)

    def broadcast(self, room_code, event, payload):
        self.sio.emit(event, payload, to=room_group(room_code), namespace=self.namespace)

    def subscribe(self, connection, room_code):
        join_room(room_group(room_code), sid=connection, namespace=self.namespace)

    def unsubscribe(self, connection, room_code):
        leave_room(room_group(room_code), sid=connection, namespace=self.namespace)


def _coordinator():
    return current_app.extensions['foxchase']['coordinator']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def handle_connect(auth=None):
    _coordinator().connect(_get_sid())


def handle_disconnect(reason=None):
    _coordinator().disconnect(_get_sid())


def handle_create_game(data=None):
    data = _payload(data)
    _coordinator().create(_get_sid(), data.get('username'), data.get('board_type') or RANDOM_BOARD)


def handle_join_game(data=None):
    data = _payload(data)
    _coordinator().join(_get_sid(), data.get('room_code'), data.get('username'))


def handle_start_game(data=None):
    _coordinator().start(_get_sid())


def handle_board_movement(data=None):
    _coordinator().move(_get_sid(), _payload(data).get('direction'))


def handle_chat_message(data=None):
    _coordinator().chat(_get_sid(), _payload(data).get('text'))


def register_socketio_handlers(namespace: str = NAMESPACE) -> None:
    """Register the game's Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create_game', handle_create_game, namespace=namespace)
    socketio.on_event('join_game', handle_join_game, namespace=namespace)
    socketio.on_event('start_game', handle_start_game, namespace=namespace)
    socketio.on_event('board_movement', handle_board_movement, namespace=namespace)
    socketio.on_event('chat_message', handle_chat_message, namespace=namespace)
