"""
Game Logger Module for the Hourly Wordle service

Structured JSON logging of API traffic and hourly word lifecycle events.
One entry per line, written to a dated file under LOG_DIR.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import Config
from .helpers import get_user_identity

# Response fields that could give the hourly word away
_HIDDEN_FIELDS = ('word', 'answer', 'hint')

_SYSTEM_USER = {'user_ip': 'system', 'user_agent': 'system'}


class GameLogger:
    """
    Centralized logging for the hourly word service.

    Entries carry an event type (USER_ACTION, SERVER_RESPONSE_SUCCESS,
    SERVER_RESPONSE_ERROR, WORD_EVENT, ERROR), the action name, who
    triggered it and free-form details.
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        level_value = logging.getLevelName(level.upper())
        self.level = level_value if isinstance(level_value, int) else logging.INFO
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        logger = logging.getLogger('hourly_wordle')
        logger.setLevel(self.level)

        # Re-creating the logger (tests, reloads) must not stack handlers
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        log_file = self.log_dir / f"word_log_{datetime.now():%Y-%m-%d}.log"
        logger.addHandler(self._handler(
            logging.FileHandler(log_file, encoding='utf-8'),
            self.level,
            '%(asctime)s | %(levelname)s | %(message)s'
        ))
        logger.addHandler(self._handler(
            logging.StreamHandler(),
            logging.WARNING,
            '%(levelname)s: %(message)s'
        ))
        return logger

    @staticmethod
    def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S'))
        return handler

    def _emit(self, level: int, event_type: str, action: str,
              user_info: Dict[str, Any], details: Dict[str, Any]):
        entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user_info,
            'details': details,
        }
        self.logger.log(level, json.dumps(entry, ensure_ascii=False, default=str))

    @staticmethod
    def _request_details(request) -> Dict[str, Any]:
        return {
            'endpoint': request.endpoint,
            'method': request.method,
            'url': request.url,
        }

    def log_user_action(self, request, action: str, **kwargs):
        """
        Record an incoming API call.

        Args:
            request: Flask request object
            action: Action name (e.g. 'submit_guess', 'get_hint')
            **kwargs: Extra details such as hour_id
        """
        details = {**self._request_details(request), **kwargs}
        self._emit(logging.INFO, 'USER_ACTION', action, get_user_identity(request), details)

    def log_server_response(self, request, action: str, success: bool,
                            response_data: Dict[str, Any], **kwargs):
        """Record what an endpoint answered, with the hourly word masked out."""
        details = {
            'success': success,
            'response_size': len(str(response_data)),
            'response_data': self._sanitize_response_data(response_data),
            **kwargs
        }
        if success:
            self._emit(logging.INFO, 'SERVER_RESPONSE_SUCCESS', action, get_user_identity(request), details)
        else:
            self._emit(logging.ERROR, 'SERVER_RESPONSE_ERROR', action, get_user_identity(request), details)

    def log_word_event(self, hour_id: Optional[str], event: str,
                       level: int = logging.INFO, **kwargs):
        """
        Record a word lifecycle event for one hour bucket.

        Args:
            hour_id: Hour bucket the event concerns
            event: Event name ('word_read', 'word_created', 'race_lost',
                'create_failed', 'pregenerate_failed', ...)
            level: Logging level for the entry
            **kwargs: Extra details. Never the plaintext word.
        """
        self._emit(level, 'WORD_EVENT', event, _SYSTEM_USER, {'hour_id': hour_id, **kwargs})

    def log_error(self, request, error: Exception, action: str):
        """Record an exception raised while serving ``action``."""
        details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            **self._request_details(request)
        }
        self._emit(logging.ERROR, 'ERROR', action, get_user_identity(request), details)

    @staticmethod
    def _sanitize_response_data(data: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        sanitized = dict(data)
        for key in _HIDDEN_FIELDS:
            if key in sanitized:
                sanitized[key] = '***'
        # Feedback rows spell the word out once solved
        if isinstance(sanitized.get('feedback'), list):
            sanitized['feedback'] = f"{len(sanitized['feedback'])} entries"
        return sanitized


# Global logger instance
game_logger = GameLogger(Config.LOG_DIR, Config.LOG_LEVEL)
