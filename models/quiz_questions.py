from models import db

class QuizQuestion(db.Model):
    __tablename__ = "quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    question_text = db.Column(db.Text, nullable=False)
    sequence_order = db.Column(db.Integer, nullable=False, default=0)
    options = db.Column(db.JSON, nullable=False)  # [{"id": "a", "text": "..."}]
    correct_answer_ids = db.Column(db.JSON, nullable=False)
    explanation = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    quiz = db.relationship("Quiz", back_populates="questions")

    @property
    def option_ids(self):
        return {str(option["id"]) for option in self.options}

    @property
    def correct_set(self):
        return {str(answer_id) for answer_id in self.correct_answer_ids}

    def to_dict(self, include_answers=False):
        data = {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "question_text": self.question_text,
            "sequence_order": self.sequence_order,
            "options": self.options,
        }
        if include_answers:
            data["correct_answer_ids"] = self.correct_answer_ids
            data["explanation"] = self.explanation
        return data
