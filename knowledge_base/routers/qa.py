"""
Q&A router
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload
from knowledge_base.database import get_db
from knowledge_base.schemas.question import (
    QuestionCreate, QuestionUpdate, AnswerCreate, AnswerUpdate,
    AnswerResponse, QuestionResponse, QuestionDetailResponse, QuestionListResponse
)
from knowledge_base.services.auth import get_current_user
from knowledge_base.services.content import sanitize_user_input
from knowledge_base.services.rate_limiter import rate_limit
from knowledge_base.models.user import User
from knowledge_base.models.question import Question, Answer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/qa", tags=["Q&A"])


def get_question_or_404(db: Session, question_id: int) -> Question:
    question = db.query(Question).filter(Question.id == question_id).first()
    if not question:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Question not found"
        )
    return question


def get_answer_or_404(db: Session, answer_id: int) -> Answer:
    answer = db.query(Answer).filter(Answer.id == answer_id).first()
    if not answer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Answer not found"
        )
    return answer


def require_author(author_id: int, user: User, what: str):
    if author_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only the author can modify this {what}"
        )


def sorted_answers(question: Question):
    """Accepted answer first, then newest first"""
    return sorted(
        question.answers,
        key=lambda a: (a.is_accepted, a.created_at.timestamp() if a.created_at else 0, a.id),
        reverse=True,
    )


def question_response(question: Question) -> QuestionResponse:
    response = QuestionResponse.model_validate(question)
    response.answer_count = len(question.answers)
    return response


@router.get("/questions", response_model=QuestionListResponse)
async def list_questions(
    answered: Optional[bool] = None,
    author_id: Optional[int] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List questions, newest first
    """
    query = db.query(Question).options(joinedload(Question.author))
    if answered is not None:
        query = query.filter(Question.is_answered == answered)
    if author_id is not None:
        query = query.filter(Question.author_id == author_id)

    total = query.count()
    questions = query.order_by(Question.created_at.desc(), Question.id.desc()).offset(offset).limit(limit).all()
    return QuestionListResponse(data=[question_response(q) for q in questions], count=total)


@router.post(
    "/questions",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("mutations"))],
)
async def create_question(
    question_data: QuestionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Ask a question
    """
    question = Question(
        title=sanitize_user_input(question_data.title),
        body=sanitize_user_input(question_data.body),
        author_id=current_user.id,
        is_answered=False,
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    return question_response(question)


@router.get("/questions/{question_id}", response_model=QuestionDetailResponse)
async def get_question(
    question_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get question with its answers (accepted first, then newest)
    """
    question = get_question_or_404(db, question_id)
    detail = QuestionDetailResponse.model_validate(question)
    detail.answer_count = len(question.answers)
    detail.answers = [AnswerResponse.model_validate(a) for a in sorted_answers(question)]
    return detail


@router.patch("/questions/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: int,
    question_data: QuestionUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Edit own question
    """
    question = get_question_or_404(db, question_id)
    require_author(question.author_id, current_user, "question")

    for field, value in question_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(question, field, sanitize_user_input(value))

    db.commit()
    db.refresh(question)
    return question_response(question)


@router.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete own question together with its answers
    """
    question = get_question_or_404(db, question_id)
    require_author(question.author_id, current_user, "question")

    db.delete(question)
    db.commit()
    return None


@router.post(
    "/questions/{question_id}/answers",
    response_model=AnswerResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("mutations"))],
)
async def create_answer(
    question_id: int,
    answer_data: AnswerCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Answer a question
    """
    question = get_question_or_404(db, question_id)
    answer = Answer(
        question_id=question.id,
        author_id=current_user.id,
        content=sanitize_user_input(answer_data.content),
        is_accepted=False,
    )
    db.add(answer)
    db.commit()
    db.refresh(answer)
    return AnswerResponse.model_validate(answer)


@router.patch("/answers/{answer_id}", response_model=AnswerResponse)
async def update_answer(
    answer_id: int,
    answer_data: AnswerUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Edit own answer
    """
    answer = get_answer_or_404(db, answer_id)
    require_author(answer.author_id, current_user, "answer")

    answer.content = sanitize_user_input(answer_data.content)
    db.commit()
    db.refresh(answer)
    return AnswerResponse.model_validate(answer)


@router.delete("/answers/{answer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_answer(
    answer_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete own answer

    Deleting the accepted answer of a question with no other answers marks
    the question as unanswered again.
    """
    answer = get_answer_or_404(db, answer_id)
    require_author(answer.author_id, current_user, "answer")

    question = answer.question
    was_accepted = answer.is_accepted
    db.delete(answer)
    db.flush()

    if was_accepted:
        remaining = db.query(Answer).filter(Answer.question_id == question.id).count()
        if remaining == 0:
            question.is_answered = False

    db.commit()
    return None


@router.post("/answers/{answer_id}/accept", response_model=AnswerResponse)
async def accept_answer(
    answer_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Accept an answer (question author only)

    Any previously accepted answer on the same question is unmarked.
    """
    answer = get_answer_or_404(db, answer_id)
    question = answer.question
    if question.author_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the question author can accept an answer"
        )

    db.query(Answer).filter(
        Answer.question_id == question.id, Answer.id != answer.id, Answer.is_accepted.is_(True)
    ).update({Answer.is_accepted: False}, synchronize_session=False)
    answer.is_accepted = True
    question.is_answered = True

    db.commit()
    db.refresh(answer)

    logger.info(f"Answer {answer.id} accepted for question {question.id}")
    return AnswerResponse.model_validate(answer)
