import pytest

from vitalsign.extraction.tokens import (
    classify_token,
    classify_tokens,
    is_blood_pressure,
    is_numeric_candidate,
    match_label,
)
from vitalsign.models import TokenKind

LABELS = ["HR", "SpO2", "ABP"]


@pytest.mark.parametrize("text", ["120/80", "99/60", "200/100"])
def test_blood_pressure_accepted(text):
    assert is_blood_pressure(text)


@pytest.mark.parametrize("text", ["1/80", "120/8", "1200/80", "120-80", "120/80mm", ""])
def test_blood_pressure_rejected(text):
    assert not is_blood_pressure(text)


@pytest.mark.parametrize("text", ["SpO2", "spo2", "SP02", "SpO2:"])
def test_spo2_variants_match(text):
    assert match_label(text, LABELS) == "SpO2"


def test_label_trailing_punctuation_stripped():
    assert match_label("HR:", LABELS) == "HR"
    assert match_label("ABP.", LABELS) == "ABP"


def test_unknown_word_is_not_a_label():
    assert match_label("PVC", LABELS) is None


def test_spo2_ignored_when_not_configured():
    assert match_label("SpO2", ["HR", "ABP"]) is None


def test_numeric_candidates():
    assert is_numeric_candidate("72")
    assert is_numeric_candidate("120/80")
    assert is_numeric_candidate("12/")
    assert not is_numeric_candidate("1234")
    assert not is_numeric_candidate("bpm")


def test_low_confidence_is_noise(make_token):
    tagged = classify_token(make_token("HR", confidence=20), LABELS, 50)
    assert tagged.kind == TokenKind.NOISE


def test_classify_tokens_keeps_order(make_token):
    tokens = [make_token("HR"), make_token("72"), make_token("~")]
    kinds = [t.kind for t in classify_tokens(tokens, LABELS, 50)]
    assert kinds == [TokenKind.LABEL, TokenKind.NUMERIC, TokenKind.NOISE]


def test_confidence_at_threshold_is_kept(make_token):
    tagged = classify_token(make_token("72", confidence=50), LABELS, 50)
    assert tagged.kind == TokenKind.NUMERIC
