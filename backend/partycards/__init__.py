from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from partycards.services.games.notifier import SocketIONotifier
    flask_app.extensions['partycards.notifier'] = SocketIONotifier(socketio)

    from partycards.errors import GameError

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    # Import and register blueprints here
    from partycards.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from partycards.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    # Register Socket.IO event handlers
    from partycards.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database with the configured card packs."""
        from partycards.cards import load_card_packs
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            expansions = load_card_packs(flask_app.config['CARD_PACKS_PATH'])
            db.session.commit()
            print(f'Database has been reset and seeded with {len(expansions)} expansion(s)!')

    @click.command('load-cards')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def load_cards_command(path):
        """Imports expansions from a JSON card pack."""
        from partycards.cards import load_card_packs
        with flask_app.app_context():
            expansions = load_card_packs(path)
            db.session.commit()
            for expansion in expansions:
                print(f'Loaded expansion {expansion.name!r} (id={expansion.id})')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(load_cards_command)

    return flask_app
