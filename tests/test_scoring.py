from __future__ import annotations

import random

import pytest

from sjt_core.randomizer import randomize_scenario
from sjt_core.scoring import (
    feedback_rows,
    option_score,
    percent,
    performance_category,
    question_total,
    score_canonical,
    score_ranking,
    total_score,
)
from sjt_core.shuffle import apply_permutation, invert_permutation
from sjt_core.types import DisplayScenario, RankEntry, Scenario
from sjt_core.validators import validate_ranking

from tests.conftest import make_scenario


def _display(sc: Scenario, perm: list[int]) -> DisplayScenario:
    return DisplayScenario(
        source=sc,
        options=apply_permutation(sc.options, perm),
        ideal_ranking=apply_permutation(sc.ideal_ranking, perm),
        explanations=apply_permutation(sc.explanations, perm),
        shuffle_map=perm,
        original_to_display=invert_permutation(perm),
    )


@pytest.mark.parametrize("diff,points", [(0, 4), (1, 3), (2, 2), (3, 1), (4, 0), (5, 0)])
def test_point_table(diff, points):
    assert option_score(1 + diff, 1) == points
    assert option_score(1, 1 + diff) == points


def test_scores_never_increase_with_distance():
    for ideal in range(1, 6):
        by_distance = sorted(range(0, 6), key=lambda u: abs(u - ideal))
        values = [option_score(u, ideal) for u in by_distance]
        assert all(b <= a for a, b in zip(values, values[1:]))


def test_display_ranking_is_remapped_before_scoring():
    sc = Scenario(
        scenario="Gift from a client",
        options=list("ABCDE"),
        ideal_ranking=[1, 2, 3, 4, 5],
        explanations=[f"why {c}" for c in "ABCDE"],
        category="Boundaries",
    )
    d = _display(sc, [2, 0, 3, 1, 4])
    assert d.options == ["C", "A", "D", "B", "E"]

    # learner ranks displayed C=1, A=2, D=3, B=4, E=5
    ranking = [RankEntry(0, 1), RankEntry(1, 2), RankEntry(2, 3), RankEntry(3, 4), RankEntry(4, 5)]
    scores = score_ranking(ranking, d)

    assert [s.option_index for s in scores] == [0, 1, 2, 3, 4]
    assert [s.user_rank for s in scores] == [2, 4, 1, 3, 5]
    assert [s.difference for s in scores] == [1, 2, 2, 1, 0]
    assert [s.score for s in scores] == [3, 2, 2, 3, 4]


def test_ranking_matching_ideal_after_remap_scores_100_percent():
    sc = Scenario(
        scenario="s",
        options=list("ABCDE"),
        ideal_ranking=[2, 4, 1, 3, 5],
        explanations=list("abcde"),
    )
    d = _display(sc, [2, 0, 3, 1, 4])
    # learner ranks displayed C=1, A=2, D=3, B=4, E=5 -> A=2, B=4, C=1, D=3, E=5
    ranking = [RankEntry(i, i + 1) for i in range(5)]
    scores = score_ranking(ranking, d)

    assert [s.score for s in scores] == [4] * 5
    total = question_total(scores)
    assert (total.earned, total.possible, total.percentage) == (20, 20, 100)


def test_random_display_with_ideal_answers_always_full_marks():
    rng = random.Random(77)
    for idx in range(25):
        ideal = list(range(1, 6))
        rng.shuffle(ideal)
        d = randomize_scenario(make_scenario(idx, ideal_ranking=ideal), rng)
        ranking = [RankEntry(i, r) for i, r in enumerate(d.ideal_ranking)]
        assert question_total(score_ranking(ranking, d)).earned == 20


def test_score_never_exceeds_twenty():
    rng = random.Random(3)
    d = randomize_scenario(make_scenario(0), rng)
    for _ in range(50):
        ranks = list(range(1, 6))
        rng.shuffle(ranks)
        total = question_total(score_ranking([RankEntry(i, r) for i, r in enumerate(ranks)], d))
        assert 0 <= total.earned <= 20
        assert total.possible == 20


def test_unranked_options_score_as_rank_zero():
    scores = score_canonical([RankEntry(0, 1)], [1, 2, 3, 4, 5])
    assert scores[0].score == 4
    assert [s.user_rank for s in scores[1:]] == [0, 0, 0, 0]
    # rank 0 against ideal 2..5 -> differences 2..5 -> 2, 1, 0, 0
    assert [s.score for s in scores[1:]] == [2, 1, 0, 0]


def test_total_score_over_several_questions():
    perfect = score_canonical([RankEntry(i, i + 1) for i in range(5)], [1, 2, 3, 4, 5])
    reversed_ = score_canonical([RankEntry(i, 5 - i) for i in range(5)], [1, 2, 3, 4, 5])
    total = total_score([perfect, reversed_])

    # reversed ranking: diffs 4, 2, 0, 2, 4 -> 0 + 2 + 4 + 2 + 0
    assert total.earned == 20 + 8
    assert total.possible == 40
    assert total.percentage == 70
    assert total.questions_count == 2


def test_total_score_of_nothing_is_zero():
    total = total_score([])
    assert (total.earned, total.possible, total.percentage) == (0, 0, 0)


def test_percent_rounds_halves_up():
    assert percent(1, 8) == 13  # 12.5
    assert percent(1, 3) == 33
    assert percent(0, 0) == 0


@pytest.mark.parametrize(
    "pct,label",
    [(100, "Excellent"), (90, "Excellent"), (89, "Good"), (80, "Good"), (70, "Satisfactory"),
     (60, "Needs Improvement"), (59, "Poor"), (0, "Poor")],
)
def test_performance_category_thresholds(pct, label):
    assert performance_category(pct).label == label


def test_validate_ranking_flags():
    ok = validate_ranking([RankEntry(i, i + 1) for i in range(5)])
    assert ok.is_valid

    partial = validate_ranking([RankEntry(0, 1), RankEntry(1, 2)])
    assert not partial.is_valid and partial.issues["incomplete"]

    dup = validate_ranking([RankEntry(i, 1 if i < 2 else i + 1) for i in range(5)])
    assert not dup.is_valid and dup.issues["duplicate_ranks"]

    out_of_range = validate_ranking([RankEntry(i, i + 2) for i in range(5)])
    assert out_of_range.issues["invalid_rank_values"]

    same_option = validate_ranking([RankEntry(0, r) for r in range(1, 6)])
    assert not same_option.is_valid


def test_feedback_rows_are_in_ideal_order_with_mismatch_notes():
    sc = Scenario(
        scenario="s",
        options=list("ABCDE"),
        ideal_ranking=[5, 1, 2, 3, 4],
        explanations=["This is the most appropriate response", "b", "c", "d", "e"],
    )
    d = _display(sc, [4, 3, 2, 1, 0])
    scores = score_ranking([RankEntry(i, d.ideal_ranking[i]) for i in range(5)], d)
    rows = feedback_rows(d, scores)

    assert [r["option"] for r in rows] == ["B", "C", "D", "E", "A"]
    assert rows[0]["label"] == "Most Appropriate Option (#1)"
    assert rows[-1]["mismatch"] and "least appropriate" in rows[-1]["mismatch"]
    assert all(r["score"] == 4 for r in rows)
    assert rows[0]["display_index"] == 3
