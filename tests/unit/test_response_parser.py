"""
Unit tests for the interest response parser.
"""
import random

import pytest

from backend.app.services.response_parser import NO_REASON, clamp_likelihood, parse_interest_response


def test_leading_percentage_is_parsed_and_removed_from_reason():
    parsed = parse_interest_response("85% The customer loves hiking gear.")
    assert parsed.likelihood == 85
    assert parsed.reason == "The customer loves hiking gear."
    assert parsed.fallback is False


def test_decimal_likelihood():
    parsed = parse_interest_response("Likelihood: 62.5 - good match")
    assert parsed.likelihood == 62.5
    assert parsed.reason == "Likelihood:  - good match"


def test_first_number_wins():
    parsed = parse_interest_response("40% now, maybe 90% next year")
    assert parsed.likelihood == 40
    assert "90%" in parsed.reason


def test_values_above_range_are_clamped():
    parsed = parse_interest_response("150% certain")
    assert parsed.likelihood == 100
    assert parsed.reason == "certain"


def test_number_only_reply_gets_default_reason():
    parsed = parse_interest_response("  73%  ")
    assert parsed.likelihood == 73
    assert parsed.reason == NO_REASON


@pytest.mark.parametrize("text", ["", None, "The customer seems keen."])
def test_missing_number_falls_back_to_random(text):
    parsed = parse_interest_response(text, rng=random.Random(7))
    assert 0 <= parsed.likelihood < 100
    assert parsed.fallback is True


def test_fallback_keeps_text_as_reason():
    parsed = parse_interest_response("Not interested at all.", rng=random.Random(1))
    assert parsed.reason == "Not interested at all."


def test_fallback_is_reproducible_with_seeded_rng():
    a = parse_interest_response("no digits", rng=random.Random(42))
    b = parse_interest_response("no digits", rng=random.Random(42))
    assert a.likelihood == b.likelihood


def test_parse_never_raises_on_odd_input():
    for text in ["%%%", "...", "\n\n", "0", "-5 degrees"]:
        parsed = parse_interest_response(text)
        assert 0 <= parsed.likelihood <= 100
        assert parsed.reason


@pytest.mark.parametrize("value,expected", [(-3, 0), (0, 0), (55.5, 55.5), (100, 100), (250, 100)])
def test_clamp_likelihood(value, expected):
    assert clamp_likelihood(value) == expected
