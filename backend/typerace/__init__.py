from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(value):
    if not value or value == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ALLOWED_ORIGINS'))
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One session manager per app; handlers reach it through current_app
    from typerace.services.party import SessionManager
    from typerace.services.party.broadcast import Broadcaster
    from typerace.services.party.challenge import ChallengeGenerator

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    flask_app.extensions['party_sessions'] = SessionManager(
        broadcaster=Broadcaster(socketio, namespace=namespace),
        spawn=socketio.start_background_task,
        sleep=socketio.sleep,
        challenge=ChallengeGenerator(
            word_count=flask_app.config.get('CHALLENGE_WORD_COUNT', 12),
            locale=flask_app.config.get('CHALLENGE_LOCALE', 'en_US'),
        ),
        round_duration_ms=flask_app.config.get('ROUND_DURATION_MS', 30000),
        allow_forced_start=flask_app.config.get('ALLOW_FORCED_START', True),
        logger=flask_app.logger,
    )

    from typerace.main import main
    flask_app.register_blueprint(main)

    from typerace.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    @click.command('serve')
    @click.option('--host', default=None, help='Interface to bind (defaults to HOST config).')
    @click.option('--port', default=None, type=int, help='Port to bind (defaults to PORT config).')
    def serve_command(host, port):
        """Runs the Socket.IO party server."""
        socketio.run(
            flask_app,
            host=host or flask_app.config['HOST'],
            port=port or flask_app.config['PORT'],
        )

    flask_app.cli.add_command(serve_command)

    return flask_app
