from __future__ import annotations

import pytest

from placement_core.question_bank import load_bank
from placement_core.resolver import (
    RECOMMENDATIONS,
    STUDY_TIME,
    _gap_adjust,
    _ladder,
    calculate_final_result,
    pct,
    score_answers,
)
from tests.conftest import make_item, right_answer, wrong_answer


def _answers(right, wrong):
    out = {it.id: right_answer(it) for it in right}
    out.update({it.id: wrong_answer(it) for it in wrong})
    return out


@pytest.mark.parametrize(
    "num, den, expected",
    [(1, 8, 13), (2, 3, 67), (1, 3, 33), (0, 5, 0), (5, 5, 100), (3, 0, 0)],
)
def test_pct_rounds_half_up(num, den, expected):
    assert pct(num, den) == expected


@pytest.mark.parametrize(
    "levels, expected",
    [
        ({"A1": 100, "A2": 70, "B1": 0, "B2": 0}, "A2"),
        ({"A1": 79, "A2": 100, "B1": 0, "B2": 0}, "A1"),
        ({"A1": 100, "A2": 100, "B1": 100, "B2": 70}, "B2"),
        ({"A1": 100, "A2": 100, "B1": 79, "B2": 90}, "B1"),
        ({"A1": 0, "A2": 0, "B1": 0, "B2": 0}, "A1"),
    ],
)
def test_ladder(levels, expected):
    assert _ladder(levels) == expected


def test_gap_never_demotes_below_bottom():
    assert _gap_adjust("A1", {"grammar": 0, "vocabulary": 0, "reading": 0}) == "A1"
    assert _gap_adjust("B2", {"grammar": 39, "vocabulary": 100, "reading": 100}) == "B1"
    assert _gap_adjust("B2", {"grammar": 40, "vocabulary": 100, "reading": 100}) == "B2"


def test_skill_gap_demotes_one_tier():
    a1_read = make_item("a1-r", "A1", "reading", 8)
    a2_read = make_item("a2-r", "A2", "reading", 2)
    a2_gram = make_item("a2-g", "A2", "grammar", 5)
    a2_voc = make_item("a2-v", "A2", "vocabulary", 5)
    b1_gram = make_item("b1-g", "B1", "grammar", 4)
    b1_gram_miss = make_item("b1-g2", "B1", "grammar", 1)
    b1_voc = make_item("b1-v", "B1", "vocabulary", 4)
    b1_voc_miss = make_item("b1-v2", "B1", "vocabulary", 1)
    asked = [a1_read, a2_read, a2_gram, a2_voc, b1_gram, b1_gram_miss, b1_voc, b1_voc_miss]
    answers = _answers(
        right=[a2_read, a2_gram, a2_voc, b1_gram, b1_voc],
        wrong=[a1_read, b1_gram_miss, b1_voc_miss],
    )

    res = calculate_final_result(asked, answers, total_questions=32)
    assert res.skill_breakdown == {"grammar": 90, "vocabulary": 90, "reading": 20}
    assert res.detailed_scores == {"A1": 0, "A2": 100, "B1": 80, "B2": 0}
    assert res.recommended_level == "A2"
    assert res.recommended_unit == 2
    assert res.recommended_lesson == 1
    assert res.confidence_score == 67
    assert res.strengths == ["grammar", "vocabulary"]
    assert res.weaknesses == ["reading"]
    assert res.recommendations == [RECOMMENDATIONS["reading"]]
    assert res.estimated_study_time == STUDY_TIME["A2"] == "3-4 months"
    assert res.questions_answered == 8 and res.total_questions == 32


def test_untested_skills_count_as_zero():
    asked = [
        make_item("a1-g", "A1", "grammar", 1),
        make_item("a2-g", "A2", "grammar", 2),
    ]
    res = calculate_final_result(asked, _answers(asked, []), total_questions=2)
    assert res.detailed_scores["A2"] == 100
    assert res.skill_breakdown == {"grammar": 100, "vocabulary": 0, "reading": 0}
    # ladder says A2, empty skills pull it back
    assert res.recommended_level == "A1"
    assert res.weaknesses == ["vocabulary", "reading"]


def test_unit_stays_one_below_threshold():
    asked = [make_item(f"a1-{sk}-{i}", "A1", sk, 1) for sk in ("grammar", "vocabulary", "reading") for i in range(2)]
    answers = _answers(asked[:5], asked[5:])  # 5/6 = 83%
    res = calculate_final_result(asked, answers, total_questions=6)
    assert res.detailed_scores["A1"] == 83
    assert res.recommended_unit == 1


def test_result_ignores_answers_for_unasked_items():
    asked = [make_item("a1-g", "A1", "grammar", 1)]
    answers = {"a1-g": "wrong", "other": "right"}
    res = calculate_final_result(asked, answers, total_questions=1)
    assert res.confidence_score == 0
    assert res.questions_answered == 1


def test_result_serialises_flat():
    res = calculate_final_result([], {}, total_questions=0)
    d = res.to_dict()
    assert set(d) == {
        "recommended_level", "recommended_unit", "recommended_lesson", "confidence_score",
        "strengths", "weaknesses", "detailed_scores", "skill_breakdown",
        "recommendations", "estimated_study_time", "questions_answered", "total_questions",
    }
    assert d["recommended_level"] == "A1"


def test_score_answers_offline():
    bank = load_bank()
    res = score_answers({"a1-numbers": " Siete ", "a1-ser-estar-basic": "es", "nope": "x"}, bank)
    assert res.questions_answered == 2
    assert res.total_questions == 32
    assert res.detailed_scores["A1"] == 100
    assert res.skill_breakdown == {"grammar": 100, "vocabulary": 100, "reading": 0}
    assert res.recommended_level == "A1"
    assert res.weaknesses == ["reading"]


def test_score_answers_total_override():
    res = score_answers({}, load_bank(), total_questions=12)
    assert res.total_questions == 12 and res.questions_answered == 0
