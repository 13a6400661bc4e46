from classes.errors import ValidationError


def validate_points_amount(amount):
    # bool is an int subclass; True is not a point value
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError("Points amount must be an integer.")
    if amount < 0:
        raise ValidationError("Points amount cannot be negative.")


def validate_length(field_name, value, max_length):
    if len(value) > max_length:
        raise ValidationError(f"{field_name} must be {max_length} characters or fewer.")


def validate_reward_schedule(data):
    """Reward values are independent non-negative ints; their order is up to the quiz author."""
    for field in ("points_first_attempt", "points_second_attempt",
                  "points_third_attempt", "points_fourth_plus_attempt"):
        value = data.get(field)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(f"'{field}' must be a non-negative integer.")


def validate_questions(questions):
    if not isinstance(questions, list):
        raise ValidationError("Questions must be a list.")
    for index, question in enumerate(questions, start=1):
        if not isinstance(question, dict):
            raise ValidationError(f"Question {index} must be a dictionary.")
        if not question.get("question_text"):
            raise ValidationError(f"Question {index} needs 'question_text'.")

        options = question.get("options")
        if not isinstance(options, list) or len(options) < 2:
            raise ValidationError(f"Question {index} needs at least two options.")
        option_ids = []
        for option in options:
            if not isinstance(option, dict) or option.get("id") in (None, ""):
                raise ValidationError(f"Every option of question {index} needs an 'id'.")
            option_ids.append(str(option["id"]))
        if len(set(option_ids)) != len(option_ids):
            raise ValidationError(f"Option ids of question {index} must be unique.")

        correct = question.get("correct_answer_ids")
        if not isinstance(correct, list) or not correct:
            raise ValidationError(f"Question {index} needs at least one correct answer.")
        if not {str(c) for c in correct} <= set(option_ids):
            raise ValidationError(f"The correct answers of question {index} must be among its options.")
