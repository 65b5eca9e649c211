"""
Unit tests for the force vocabulary and the keyword lexicon.
"""

import pytest

from jtbd_forces.domain.vocabulary import (
    ALL_FORCES,
    BARRIER_FORCES,
    FORCE_PRIORITY,
    JTBDForce,
    PULL_FORCES,
    PUSH_FORCES,
    is_valid_strength,
    rank_forces,
    require_all_forces,
)
from jtbd_forces.services.forces import lexicon


def test_force_groups_are_fixed():
    assert set(PUSH_FORCES) == {JTBDForce.PAIN_OF_OLD, JTBDForce.DEMOGRAPHIC}
    assert PULL_FORCES == (JTBDForce.PULL_OF_NEW,)
    assert set(BARRIER_FORCES) == {JTBDForce.ANCHORS_TO_OLD, JTBDForce.ANXIETY_OF_NEW}


def test_priority_order():
    assert FORCE_PRIORITY == (
        JTBDForce.PAIN_OF_OLD,
        JTBDForce.PULL_OF_NEW,
        JTBDForce.ANCHORS_TO_OLD,
        JTBDForce.ANXIETY_OF_NEW,
        JTBDForce.DEMOGRAPHIC,
    )


def test_rank_forces_breaks_ties_by_priority():
    scores = {force: 1.0 for force in ALL_FORCES}
    assert rank_forces(scores) == list(FORCE_PRIORITY)

    scores[JTBDForce.DEMOGRAPHIC] = 2.0
    assert rank_forces(scores)[0] == JTBDForce.DEMOGRAPHIC
    assert rank_forces(scores)[1] == JTBDForce.PAIN_OF_OLD


def test_require_all_forces_rejects_incomplete_table():
    table = {force: 1 for force in ALL_FORCES if force != JTBDForce.ANXIETY_OF_NEW}
    with pytest.raises(RuntimeError, match="anxiety_of_new"):
        require_all_forces(table, "TEST_TABLE")


def test_is_valid_strength():
    assert is_valid_strength(1.0)
    assert is_valid_strength(5.0)
    assert not is_valid_strength(0.99)
    assert not is_valid_strength(5.01)


def test_lexicon_tables_cover_every_force():
    for table in (
        lexicon.FORCE_QUESTION_KEYWORDS,
        lexicon.INTENSITY_ANCHORS,
        lexicon.QUESTION_PATTERNS,
        lexicon.ANCHOR_PATTERNS,
    ):
        assert set(table.keys()) == set(ALL_FORCES)
        assert all(table[force] for force in ALL_FORCES)


def test_anchor_scores_stay_on_scale():
    for anchors in lexicon.INTENSITY_ANCHORS.values():
        assert all(1.0 <= score <= 5.0 for score in anchors.values())


def test_tokenize_keeps_negation_apostrophes():
    assert lexicon.tokenize("It DOESN'T crash, really!") == ["it", "doesn't", "crash", "really"]


def test_content_words_drop_stopwords():
    assert lexicon.content_words(lexicon.tokenize("Any other comments?")) == ["comments"]
