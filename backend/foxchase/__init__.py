from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or ['*']
    if '*' in allowed_origins:
        allowed_origins = '*'

    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from foxchase.services.games import BoardCatalog, RoomRegistry, SessionCoordinator
    from foxchase.socketio_events import SocketIOChannel, register_socketio_handlers

    # Templates are read once, before any connection is served
    catalog = BoardCatalog()
    catalog.load(flask_app.config['BOARDS_DIR'], logger=flask_app.logger)

    registry = RoomRegistry(
        catalog,
        capacity=flask_app.config['MAX_PLAYERS'],
        code_length=flask_app.config['ROOM_CODE_LENGTH'],
        code_attempts=flask_app.config['ROOM_CODE_ATTEMPTS'],
    )
    coordinator = SessionCoordinator(
        catalog,
        registry,
        SocketIOChannel(socketio),
        move_interval_ms=flask_app.config['MOVE_INTERVAL_MS'],
        chat_interval_ms=flask_app.config['CHAT_INTERVAL_MS'],
        username_max_length=flask_app.config['USERNAME_MAX_LENGTH'],
        reap_empty_rooms=flask_app.config['REAP_EMPTY_ROOMS'],
        logger=flask_app.logger,
    )
    flask_app.extensions['foxchase'] = {
        'catalog': catalog,
        'registry': registry,
        'coordinator': coordinator,
    }

    from foxchase.main import main
    flask_app.register_blueprint(main)

    from foxchase.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api')

    register_socketio_handlers()

    @click.command('boards')
    def boards_command():
        """Lists the loaded board templates."""
        if not catalog.names():
            click.echo('No board templates loaded.')
            return
        for name in catalog.names():
            grid = catalog.build_grid(name)
            click.echo(f'{name}: {grid.width}x{grid.height}, {len(grid.passable_tiles())} open tiles')

    flask_app.cli.add_command(boards_command)

    return flask_app
