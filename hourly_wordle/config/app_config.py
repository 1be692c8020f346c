"""
Configuration Management Module

Centralized configuration management following the 12-factor app methodology.
All configuration is loaded from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load environment variables from config.env
load_dotenv('hourly_wordle/config/config.env')


class Config:
    """Base configuration class with all settings."""

    # Flask Settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    TESTING = False

    # Server Settings
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', 5000))

    # Document Store Settings (in-memory store when MONGO_URI is unset)
    MONGO_URI = os.getenv('MONGO_URI')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'hourly_wordle')
    WORDS_COLLECTION = os.getenv('WORDS_COLLECTION', 'words')
    PROGRESS_COLLECTION = os.getenv('PROGRESS_COLLECTION', 'guesses')

    # Store Retry Settings (seconds)
    STORE_MAX_RETRIES = int(os.getenv('STORE_MAX_RETRIES', 3))
    STORE_BASE_DELAY = float(os.getenv('STORE_BASE_DELAY', 1.0))
    STORE_MAX_DELAY = float(os.getenv('STORE_MAX_DELAY', 5.0))
    STORE_JITTER = float(os.getenv('STORE_JITTER', 1.0))

    # Word Record Settings
    WORD_SOURCE = os.getenv('WORD_SOURCE', 'client')
    DICTIONARY_VERSION = os.getenv('DICTIONARY_VERSION', 'v1')
    PREGENERATE_HOURS = int(os.getenv('PREGENERATE_HOURS', 0))

    # Logging Settings
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    MONGO_URI = None
    STORE_BASE_DELAY = 0.0
    STORE_MAX_DELAY = 0.0
    STORE_JITTER = 0.0


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
