from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

from tictac.services.games.lobby import LobbyDirectory
from tictac.services.games.sessions import SessionManager

socketio = SocketIO()
sessions = SessionManager()
lobby = LobbyDirectory()

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    # In-memory game state starts empty for every app instance
    sessions.init_app(flask_app)
    lobby.init_app(flask_app)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(
        flask_app,
        cors_allowed_origins=allowed_origins,
        async_mode=flask_app.config.get('SOCKETIO_ASYNC_MODE'),
    )

    from tictac.main import main
    flask_app.register_blueprint(main)

    from tictac.api.rooms import rooms
    # Mount lobby routes under /api to match frontend API client
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers
    from tictac.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    return flask_app
