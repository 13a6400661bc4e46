import pytest

from classes.errors import NotFoundError, ValidationError
from classes.validators import validate_points_amount, validate_questions, validate_reward_schedule


def test_points_amount_accepts_zero_and_positive():
    validate_points_amount(0)
    validate_points_amount(15)


def test_reward_schedule_allows_any_order():
    validate_reward_schedule({"points_first_attempt": 1, "points_second_attempt": 9,
                              "points_third_attempt": 0, "points_fourth_plus_attempt": 9})


def test_questions_with_multiple_correct_answers():
    validate_questions([{
        "question_text": "Pick two",
        "options": [{"id": 1, "text": "x"}, {"id": 2, "text": "y"}, {"id": 3, "text": "z"}],
        "correct_answer_ids": [1, "3"],
    }])


def test_question_must_be_dict():
    with pytest.raises(ValidationError, match="Question 2"):
        validate_questions([
            {"question_text": "Q", "options": [{"id": "a"}, {"id": "b"}], "correct_answer_ids": ["a"]},
            "Q2",
        ])


def test_not_found_message():
    error = NotFoundError("Quiz", 7)

    assert error.message == "Quiz with ID 7 not found"
    assert error.status_code == 404
    assert error.to_dict() == {"error": "Quiz with ID 7 not found"}
