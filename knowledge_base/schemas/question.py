"""
Q&A schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from knowledge_base.schemas.common import AuthorSummary


def _required_text(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value


class QuestionCreate(BaseModel):
    title: str = Field(..., max_length=200)
    body: str = Field(..., max_length=20000)

    @field_validator("title")
    @classmethod
    def check_title(cls, value: str) -> str:
        return _required_text(value, "Title")

    @field_validator("body")
    @classmethod
    def check_body(cls, value: str) -> str:
        return _required_text(value, "Body")


class QuestionUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    body: Optional[str] = Field(None, max_length=20000)

    @field_validator("title")
    @classmethod
    def check_title(cls, value: Optional[str]) -> Optional[str]:
        return _required_text(value, "Title") if value is not None else value

    @field_validator("body")
    @classmethod
    def check_body(cls, value: Optional[str]) -> Optional[str]:
        return _required_text(value, "Body") if value is not None else value


class AnswerCreate(BaseModel):
    content: str = Field(..., max_length=20000)

    @field_validator("content")
    @classmethod
    def check_content(cls, value: str) -> str:
        return _required_text(value, "Content")


class AnswerUpdate(AnswerCreate):
    pass


class AnswerResponse(BaseModel):
    id: int
    question_id: int
    author_id: int
    content: str
    is_accepted: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    author: Optional[AuthorSummary] = None

    class Config:
        from_attributes = True


class QuestionResponse(BaseModel):
    id: int
    title: str
    body: str
    author_id: int
    is_answered: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    author: Optional[AuthorSummary] = None
    answer_count: int = 0

    class Config:
        from_attributes = True


class QuestionDetailResponse(QuestionResponse):
    answers: List[AnswerResponse] = []


class QuestionListResponse(BaseModel):
    data: List[QuestionResponse]
    count: int
