"""
Hourly Wordle Service Package

One secret five-letter word per UTC hour, shared by every player through a
document store with create-if-absent semantics and deterministic word
selection. No server holds the answer: any process running the same word
list resolves the same word for the same hour.
"""

from flask import Flask
from flask_cors import CORS
from .config import Config


def create_app(config_class=Config):
    """
    Application factory pattern for creating Flask app instances.

    Services are wired separately (see main.py) so tests can install
    their own store and lexicon before creating the app.

    Args:
        config_class: Configuration class to use

    Returns:
        Flask application instance with all extensions initialized
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app)

    # Register blueprints
    from .controllers.word_controller import word_bp

    app.register_blueprint(word_bp, url_prefix='/api')

    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}

    return app
