from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator

from quizhub.schemas.common import UTCDateTime


class StartQuizRequest(BaseModel):
    user_id: int
    quiz_id: int


class SubmitAnswerRequest(BaseModel):
    user_id: int
    question_id: int
    answer_text: Optional[str] = None
    selected_option_id: Optional[int] = None
    attempt_id: Optional[int] = Field(
        None, description="Attempt to record the answer in; defaults to the latest in-progress attempt"
    )

    @model_validator(mode="after")
    def require_answer(self):
        if self.selected_option_id is None and not (self.answer_text and self.answer_text.strip()):
            raise ValueError("Either answer_text or selected_option_id must be provided")
        return self


class CompleteQuizRequest(BaseModel):
    attempt_id: int


class QuizAttemptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    quiz_id: int
    score: float
    total_questions: int
    completed_at: Optional[UTCDateTime]
    started_at: UTCDateTime


class UserAnswerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    question_id: int
    attempt_id: Optional[int]
    answer_text: Optional[str]
    selected_option_id: Optional[int]
    is_correct: bool
    answered_at: UTCDateTime


class LeaderboardEntry(QuizAttemptResponse):
    rank: int
    username: str

