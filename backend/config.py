import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list of origins allowed for HTTP and Socket.IO
    CORS_ORIGINS = [
        o.strip() for o in (
            os.environ.get('CORS_ORIGINS')
            or 'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174'
        ).split(',') if o.strip()
    ]
    # Lobby expiry (seconds)
    LOBBY_ROOM_TTL_SEC = int(os.environ.get('LOBBY_ROOM_TTL_SEC', '3600'))
    CREATOR_GRACE_SEC = int(os.environ.get('CREATOR_GRACE_SEC', '30'))
    # None lets Flask-SocketIO pick eventlet/gevent/threading
    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE') or None
