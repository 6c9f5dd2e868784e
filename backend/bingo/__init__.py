import logging
import os

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from bingo.config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__, static_folder=None)
    flask_app.config.from_object(config_class)
    logging.getLogger('bingo').setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('ALLOWED_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per process; rooms live until the process exits
    from bingo.gateway import Gateway
    from bingo.services.games import RoomRegistry
    registry = RoomRegistry()
    gateway = Gateway(
        registry,
        default_game_id=flask_app.config.get('DEFAULT_GAME_ID', 'default'),
        default_name=flask_app.config.get('DEFAULT_PLAYER_NAME', 'Anonymous'),
    )
    flask_app.extensions['bingo'] = gateway

    from bingo.main import main
    flask_app.register_blueprint(main)

    from bingo.api.auth import auth
    flask_app.register_blueprint(auth, url_prefix='/api')

    from bingo.socketio_events import register_socketio_handlers
    register_socketio_handlers(gateway, testing=flask_app.config.get('TESTING', False))

    public_dir = flask_app.config.get('PUBLIC_DIR')
    if public_dir and not os.path.isdir(public_dir):
        flask_app.logger.info(f"[static] no built client at {public_dir}")

    @click.command('themes')
    def themes_command():
        """Lists the available card themes."""
        from bingo.themes import list_themes
        for theme in list_themes():
            click.echo(f"{theme.key}\t{len(theme.items)}\t{theme.name}")

    flask_app.cli.add_command(themes_command)

    return flask_app
