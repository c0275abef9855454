from vitalsign.extraction.matcher import center_distance, find_closest_number
from vitalsign.models import UNMATCHED_POSITION, LabelSlot


def test_closest_candidate_wins(make_token):
    slot = LabelSlot("ABP", make_token("ABP", 0, 0))
    candidates = [make_token("120/80", 5, 5), make_token("110/70", 1, 0)]
    assert find_closest_number(slot, candidates) == "110/70"


def test_no_candidates_returns_zero(make_token):
    slot = LabelSlot("HR", make_token("HR", 300, 200))
    assert find_closest_number(slot, []) == "0"


def test_unmatched_label_returns_zero(make_token):
    slot = LabelSlot("HR")
    assert slot.position == UNMATCHED_POSITION
    assert find_closest_number(slot, [make_token("72", 0, 0)]) == "0"


def test_tie_keeps_first_emitted(make_token):
    slot = LabelSlot("HR", make_token("HR", 0, 0))
    candidates = [make_token("72", 3, 4), make_token("73", -3, -4)]
    assert find_closest_number(slot, candidates) == "72"


def test_distance_uses_box_centers(make_token):
    a = make_token("HR", 0, 0, w=10, h=10)
    b = make_token("72", 3, 4, w=2, h=2)
    assert center_distance(a, b) == 5.0
