"""
Hourly Wordle Server - Main Entry Point

This is the main entry point for the hourly word service.
It initializes all services and starts the Flask application.
"""

import asyncio

from hourly_wordle import create_app
from hourly_wordle.config import Config
from hourly_wordle.services.lexicon import initialize_lexicon_provider
from hourly_wordle.services.word_lifecycle import initialize_word_lifecycle
from hourly_wordle.utils.game_logger import game_logger


def main():
    """Main function to initialize services and start the server."""
    try:
        print("Initializing services...")

        lexicon = initialize_lexicon_provider(version=Config.DICTIONARY_VERSION)
        print(f"✓ Dictionary loaded: {len(lexicon.lexicon.allowed)} words, "
              f"{len(lexicon.lexicon.solutions)} solutions")

        lifecycle = initialize_word_lifecycle(Config, lexicon)
        if asyncio.run(lifecycle.store.ping()):
            print("✓ Word store reachable")
        else:
            print("✗ Word store not reachable, requests will retry")

        if Config.PREGENERATE_HOURS > 0:
            generated = asyncio.run(lifecycle.pre_generate(Config.PREGENERATE_HOURS))
            print(f"✓ Pre-generated {len(generated)}/{Config.PREGENERATE_HOURS} hourly words")

        print("Creating Flask application...")
        app = create_app(Config)
        print("✓ Flask application created successfully")

        game_logger.logger.info("Hourly Wordle Server Starting")

        print(f"\nStarting Hourly Wordle Server on {Config.HOST}:{Config.PORT}")
        print(f"Debug mode: {Config.DEBUG}")
        print(f"Store: {'MongoDB' if Config.MONGO_URI else 'in-memory'}")
        print("=" * 50)

        app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Hourly Wordle Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
