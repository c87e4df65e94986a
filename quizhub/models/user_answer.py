from typing import Optional
from datetime import datetime
from sqlalchemy import Text, Integer, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column
from quizhub.db.base import BaseModel


class UserAnswer(BaseModel):
    __tablename__ = "user_answers"

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    question_id: Mapped[int] = mapped_column(Integer, ForeignKey("questions.id"), nullable=False, index=True)
    attempt_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("quiz_attempts.id"), index=True)
    answer_text: Mapped[Optional[str]] = mapped_column(Text)
    selected_option_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("answer_options.id"))
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    answered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
