"""
Word Controller

Handles all hourly-word HTTP endpoints.
"""

from datetime import datetime, timezone

from flask import Blueprint, request, jsonify

from ..config.game_settings import MAX_ROUNDS
from ..errors import (
    CoordinationError,
    HourlyWordleError,
    InputError,
    StoreError,
    friendly_message,
)
from ..models.game import GameProgress, LetterFeedback
from ..services.evaluator import aggregate_letter_status, evaluate, is_exact_match, suggest_hint
from ..services.lexicon import get_lexicon_provider
from ..services.time_keying import (
    bucket_id,
    bucket_start,
    format_time_remaining,
    milliseconds_until_next_bucket,
)
from ..services.word_lifecycle import get_word_lifecycle
from ..utils.game_logger import game_logger

word_bp = Blueprint('word', __name__)

MAX_PREGENERATE_HOURS = 168


def _error_response(action: str, error: Exception):
    """Log an error and turn it into a JSON response with a fitting status code."""
    game_logger.log_error(request, error, action)

    if isinstance(error, InputError):
        status, message = 400, str(error)
    elif isinstance(error, StoreError):
        status, message = 503, friendly_message(error.kind)
    elif isinstance(error, CoordinationError):
        status, message = 503, 'Could not agree on the word for this hour. Please try again.'
    elif isinstance(error, HourlyWordleError):
        status, message = 500, str(error)
    else:
        status, message = 500, 'Internal server error'

    error_response = {
        'success': False,
        'error': message
    }
    game_logger.log_server_response(request, action, False, error_response)
    return jsonify(error_response), status


def _service_unavailable():
    return jsonify({
        'success': False,
        'error': 'Word service unavailable'
    }), 500


def _parse_feedback_rows(raw_rows):
    if not isinstance(raw_rows, list):
        raise InputError('Feedback must be a list of rows')
    try:
        return [[LetterFeedback.from_dict(entry) for entry in row] for row in raw_rows]
    except (KeyError, TypeError, ValueError) as e:
        raise InputError(f'Malformed feedback: {e}') from e


def _resolve_hour_id(raw_hour_id) -> str:
    if raw_hour_id is None:
        return bucket_id()
    if not isinstance(raw_hour_id, str):
        raise InputError('hour_id must be a string')
    try:
        start = bucket_start(raw_hour_id)
    except ValueError as e:
        raise InputError(str(e)) from e
    if start > datetime.now(timezone.utc):
        raise InputError('That hour has not started yet')
    return raw_hour_id


@word_bp.route('/time', methods=['GET'])
def get_time():
    """Current hour id and countdown to the next word."""
    ms_until_next = milliseconds_until_next_bucket()
    return jsonify({
        'success': True,
        'hour_id': bucket_id(),
        'ms_until_next': ms_until_next,
        'time_remaining': format_time_remaining(ms_until_next)
    })


@word_bp.route('/word/current', methods=['GET'])
async def current_word():
    """Obfuscated record for the current hour (never the plaintext)."""
    lifecycle = get_word_lifecycle()
    if not lifecycle:
        return _service_unavailable()

    try:
        game_logger.log_user_action(request, 'current_word')
        response_data = {
            'success': True,
            **await lifecycle.describe_hour(bucket_id())
        }
        game_logger.log_server_response(request, 'current_word', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('current_word', e)


@word_bp.route('/guess', methods=['POST'])
async def submit_guess():
    """Validate a guess and score it against the hour's word."""
    lifecycle = get_word_lifecycle()
    lexicon = get_lexicon_provider()
    if not lifecycle or not lexicon:
        return _service_unavailable()

    try:
        data = request.get_json(silent=True) or {}
        guess = data.get('guess')
        if not guess or not isinstance(guess, str):
            raise InputError('Guess is required')
        guess = guess.strip()

        hour_id = _resolve_hour_id(data.get('hour_id'))
        game_logger.log_user_action(request, 'submit_guess', hour_id=hour_id)

        await lexicon.load()
        if not lexicon.is_allowed_guess(guess):
            raise InputError('Word not in word list')

        secret = await lifecycle.get_or_create(hour_id)
        feedback = evaluate(guess, secret)

        response_data = {
            'success': True,
            'hour_id': hour_id,
            'feedback': [entry.to_dict() for entry in feedback],
            'solved': is_exact_match(guess, secret)
        }
        game_logger.log_server_response(request, 'submit_guess', True, response_data,
                                        solved=response_data['solved'])
        return jsonify(response_data)

    except Exception as e:
        return _error_response('submit_guess', e)


@word_bp.route('/hint', methods=['POST'])
async def get_hint():
    """Suggest a word consistent with the feedback so far."""
    lexicon = get_lexicon_provider()
    if not lexicon:
        return _service_unavailable()

    try:
        data = request.get_json(silent=True) or {}
        guesses = data.get('guesses', [])
        if not isinstance(guesses, list) or not all(isinstance(g, str) for g in guesses):
            raise InputError('guesses must be a list of words')
        feedback_rows = _parse_feedback_rows(data.get('feedback', []))
        if len(feedback_rows) != len(guesses):
            raise InputError('Each guess needs exactly one feedback row')

        game_logger.log_user_action(request, 'get_hint', guess_count=len(guesses))
        await lexicon.load()
        hint = suggest_hint(guesses, feedback_rows, lexicon)

        response_data = {
            'success': True,
            'hint': hint.upper() if hint else None
        }
        game_logger.log_server_response(request, 'get_hint', True, response_data, found=hint is not None)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('get_hint', e)


@word_bp.route('/keyboard', methods=['POST'])
def get_keyboard():
    """Best known status per letter."""
    try:
        data = request.get_json(silent=True) or {}
        feedback_rows = _parse_feedback_rows(data.get('feedback', []))
        letter_status = aggregate_letter_status(feedback_rows)

        return jsonify({
            'success': True,
            'letters': {letter: status.value for letter, status in sorted(letter_status.items())}
        })

    except Exception as e:
        return _error_response('get_keyboard', e)


@word_bp.route('/progress', methods=['POST'])
async def save_progress():
    """Store a game progress document for analytics."""
    lifecycle = get_word_lifecycle()
    if not lifecycle:
        return _service_unavailable()

    try:
        data = request.get_json(silent=True) or {}
        hour_id = _resolve_hour_id(data.get('hour_id'))
        guesses = data.get('guesses', [])
        game_status = data.get('game_status', 'playing')
        if game_status not in ('playing', 'won', 'lost'):
            raise InputError('game_status must be "playing", "won" or "lost"')
        if not isinstance(guesses, list) or not all(isinstance(g, str) for g in guesses):
            raise InputError('guesses must be a list of words')
        if len(guesses) > MAX_ROUNDS:
            raise InputError(f'A game has at most {MAX_ROUNDS} guesses')

        progress = GameProgress(
            hour_id=hour_id,
            guesses=[g.upper() for g in guesses],
            game_status=game_status,
            last_played=datetime.now(timezone.utc).isoformat()
        )
        game_logger.log_user_action(request, 'save_progress', hour_id=hour_id, game_status=game_status)
        progress_id = await lifecycle.store.save_progress(progress)

        response_data = {
            'success': True,
            'id': progress_id
        }
        game_logger.log_server_response(request, 'save_progress', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('save_progress', e)


@word_bp.route('/pregenerate', methods=['POST'])
async def pregenerate():
    """Warm up the upcoming hours."""
    lifecycle = get_word_lifecycle()
    if not lifecycle:
        return _service_unavailable()

    try:
        data = request.get_json(silent=True) or {}
        count = data.get('count', 24)
        if not isinstance(count, int) or isinstance(count, bool) or not 0 < count <= MAX_PREGENERATE_HOURS:
            raise InputError(f'count must be an integer between 1 and {MAX_PREGENERATE_HOURS}')

        game_logger.log_user_action(request, 'pregenerate', count=count)
        generated = await lifecycle.pre_generate(count)

        response_data = {
            'success': True,
            'generated': generated,
            'failed': count - len(generated)
        }
        game_logger.log_server_response(request, 'pregenerate', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('pregenerate', e)
