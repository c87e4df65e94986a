from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from quizhub.models.question import QuestionType
from quizhub.schemas.common import UTCDateTime


class QuizCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    created_by: int


class QuizResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str]
    created_by: int
    created_at: UTCDateTime
    updated_at: UTCDateTime


class AnswerOptionCreate(BaseModel):
    option_text: str = Field(..., min_length=1)
    is_correct: bool
    order_index: int = Field(..., ge=0)


class AnswerOptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question_id: int
    option_text: str
    is_correct: bool
    order_index: int


class QuestionCreate(BaseModel):
    quiz_id: int
    question_text: str = Field(..., min_length=1)
    question_type: QuestionType
    order_index: int = Field(..., ge=0, description="Position of the question within its quiz")
    answer_options: Optional[List[AnswerOptionCreate]] = None


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    question_text: str
    question_type: QuestionType
    order_index: int
    created_at: UTCDateTime
    answer_options: List[AnswerOptionResponse] = []


class QuizQuestionDetail(BaseModel):
    id: int
    question_text: str
    question_type: QuestionType
    order_index: int
    answer_options: List[AnswerOptionResponse]


class QuizWithQuestions(QuizResponse):
    questions: List[QuizQuestionDetail]
