import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    PORT = int(os.environ.get('PORT') or '3000')
    # Directory holding the <name>.json board templates
    BOARDS_DIR = os.environ.get('BOARDS_DIR') or os.path.join(BASE_DIR, 'boards')
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',') if o.strip()]
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '8'))
    USERNAME_MAX_LENGTH = int(os.environ.get('USERNAME_MAX_LENGTH', '20'))
    # Minimum gap between accepted moves / chat messages per connection (ms)
    MOVE_INTERVAL_MS = int(os.environ.get('MOVE_INTERVAL_MS', '500'))
    CHAT_INTERVAL_MS = int(os.environ.get('CHAT_INTERVAL_MS', '500'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
    ROOM_CODE_ATTEMPTS = int(os.environ.get('ROOM_CODE_ATTEMPTS', '10'))
    # Drop a room from the registry once its last player disconnects
    REAP_EMPTY_ROOMS = _env_flag('REAP_EMPTY_ROOMS', True)
