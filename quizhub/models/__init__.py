# Import all models for Alembic to detect
from quizhub.models.user import User
from quizhub.models.quiz import Quiz
from quizhub.models.question import Question, QuestionType
from quizhub.models.answer_option import AnswerOption
from quizhub.models.quiz_attempt import QuizAttempt
from quizhub.models.user_answer import UserAnswer
