import uuid
from typing import List, Literal, Optional

from fastapi_users import schemas as fu_schemas
from pydantic import BaseModel, Field

from .models import QuestionStatus, Role

# =========================
# USER SCHEMAS
# =========================
class UserRead(fu_schemas.BaseUser[int]):
    role: Role = Role.user


class UserCreate(fu_schemas.BaseUserCreate):
    pass


# =========================
# CATEGORY SCHEMAS
# =========================
class CategoryRead(BaseModel):
    id: uuid.UUID
    name: str

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)


class CategoriesRead(BaseModel):
    categories: List[CategoryRead] = []


# =========================
# CATALOG SCHEMAS
# =========================
class GlobalQuestionRead(BaseModel):
    id: uuid.UUID
    title: str
    category_id: uuid.UUID

    class Config:
        from_attributes = True


class GlobalQuestionCreate(BaseModel):
    title: str = Field(min_length=1)
    category_id: Optional[uuid.UUID] = None


class GlobalQuestionsRead(BaseModel):
    global_questions: List[GlobalQuestionRead] = []


# =========================
# PERSONAL QUESTION SCHEMAS
# =========================
class QuestionRead(BaseModel):
    id: uuid.UUID
    origin: Literal["catalog", "custom"]
    global_question_id: Optional[uuid.UUID] = None
    title: str
    category_id: uuid.UUID
    user_id: int
    answer: Optional[str] = None
    status: QuestionStatus

    @classmethod
    def from_question(cls, question) -> "QuestionRead":
        return cls(
            id=question.id,
            origin=question.origin.kind,
            global_question_id=question.global_question_id,
            title=question.title,
            category_id=question.category_id,
            user_id=question.user_id,
            answer=question.answer,
            status=question.status,
        )


class QuestionsRead(BaseModel):
    questions: List[QuestionRead] = []


class QuestionCreate(BaseModel):
    user_id: int
    title: str = Field(min_length=1)


class AnswerRequest(BaseModel):
    answer: Optional[str] = None
    new_status: Optional[QuestionStatus] = None


# =========================
# ADDRESS SETTINGS SCHEMAS
# =========================
class AddressSettingsBase(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    street: Optional[str] = None
    building: Optional[str] = None
    apartment: Optional[str] = None
    postal_code: Optional[str] = None


class AddressSettingsRead(AddressSettingsBase):
    user_id: int

    class Config:
        from_attributes = True


class AddressSettingsUpdate(AddressSettingsBase):
    pass


# =========================
# BOOK SCHEMAS
# =========================
class BookDeliveryRead(BaseModel):
    user_id: int
    question_count: int
    recipient: str
    filename: str
    status: Literal["delivered", "queued"]
