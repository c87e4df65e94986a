from quizhub.schemas.quiz_schema import QuestionResponse


def correct_option_id(question: QuestionResponse) -> int:
    return next(o.id for o in question.answer_options if o.is_correct)


def wrong_option_id(question: QuestionResponse) -> int:
    return next(o.id for o in question.answer_options if not o.is_correct)
