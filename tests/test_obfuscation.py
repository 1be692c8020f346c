import base64

import pytest

from hourly_wordle.errors import DecodeError, IntegrityError
from hourly_wordle.services.obfuscation import (
    ENCODED_PAYLOAD_PATTERN,
    decode,
    encode,
    fingerprint,
    key_for,
    verify_fingerprint,
)
from hourly_wordle.utils.helpers import string_hash, to_base36

HOUR = "2025092323"


def test_key_for_is_character_code_sum_mod_26():
    # ten digits summing to 28 plus ten times ord('0')
    assert key_for(HOUR) == (28 + 10 * 48) % 26 == 14
    assert key_for(HOUR) == key_for(HOUR)


def test_key_for_stays_in_range():
    for hour in range(24):
        assert 0 <= key_for(f"20240101{hour:02d}") < 26


def test_encode_shifts_then_base64s():
    payload = encode("HELLO", HOUR)
    assert base64.b64decode(payload).decode() == "vszzc"
    assert ENCODED_PAYLOAD_PATTERN.match(payload)


def test_decode_round_trip_returns_lowercase():
    for word in ["HELLO", "crane", "ZeBrA", "about", "yacht"]:
        for hour in ["2024022912", "2024123123", HOUR, "2025010100"]:
            assert decode(encode(word, hour), hour) == word.lower()


def test_encoded_payload_differs_by_hour():
    assert encode("crane", "2024010100") != encode("crane", "2024010101")


def test_shift_passes_non_letters_through():
    payload = encode("ab-1!", HOUR)
    assert decode(payload, HOUR) == "ab-1!"


@pytest.mark.parametrize("payload", ["not base64!!", "abc", "", "====", "aGVsbG8=x"])
def test_decode_rejects_malformed_payload(payload):
    with pytest.raises(DecodeError):
        decode(payload, HOUR)


def test_decode_error_is_an_integrity_error():
    with pytest.raises(IntegrityError):
        decode("%%%", HOUR)


def test_fingerprint_is_case_insensitive_and_hour_salted():
    assert fingerprint("CRANE", HOUR) == fingerprint("crane", HOUR)
    assert fingerprint("crane", HOUR) != fingerprint("crane", "2025092322")
    assert fingerprint("crane", HOUR) != fingerprint("slate", HOUR)


def test_fingerprint_is_short_base36():
    value = fingerprint("crane", HOUR)
    assert value and len(value) <= 7
    assert set(value) <= set("0123456789abcdefghijklmnopqrstuvwxyz")


def test_verify_fingerprint():
    stored = fingerprint("crane", HOUR)
    assert verify_fingerprint("Crane", stored, HOUR)
    assert not verify_fingerprint("slate", stored, HOUR)
    assert not verify_fingerprint("crane", stored, "2025092300")


def test_string_hash_matches_32bit_rolling_hash():
    assert string_hash("") == 0
    assert string_hash("a") == 97
    assert string_hash("ab") == 97 * 31 + 98
    assert string_hash("hello") == 99162322


def test_string_hash_wraps_to_signed_32_bits():
    for text in ["a much longer string that overflows", HOUR * 5, "zzzzzzzzzzzzzz"]:
        assert -2 ** 31 <= string_hash(text) < 2 ** 31


def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    assert to_base36(99162322) == "1n1e4y"
    with pytest.raises(ValueError):
        to_base36(-1)
