import enum
import uuid
from dataclasses import dataclass
from typing import Union

from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, Text, DateTime, func, Uuid, Index,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship

from .database import Base

# Well-known category for custom questions and uncategorised catalog entries
DEFAULT_CATEGORY_ID = uuid.UUID("ea815826-0c02-e446-a984-00f62a687381")
DEFAULT_CATEGORY_NAME = "General"


class Role(str, enum.Enum):
    admin = "admin"
    user = "user"


class QuestionStatus(str, enum.Enum):
    unanswered = "unanswered"
    answered = "answered"


@dataclass(frozen=True)
class CatalogOrigin:
    global_question_id: uuid.UUID
    kind = "catalog"


@dataclass(frozen=True)
class CustomOrigin:
    kind = "custom"


QuestionOrigin = Union[CatalogOrigin, CustomOrigin]


# ---------------------------
# USER MODEL
# ---------------------------
class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    questions = relationship("Question", back_populates="user", cascade="all, delete-orphan")
    address_settings = relationship(
        "AddressSettings",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def role(self) -> Role:
        return Role.admin if self.is_superuser else Role.user


# ---------------------------
# CATALOG
# ---------------------------
class Category(Base):
    __tablename__ = "category"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(128), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Category {self.name}>"


class GlobalQuestion(Base):
    __tablename__ = "global_question"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    category_id = Column(Uuid, ForeignKey("category.id"), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category")


# ---------------------------
# PERSONAL QUESTIONS
# ---------------------------
class Question(Base):
    __tablename__ = "question"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # catalog entry this copy was taken from; NULL marks a user-authored question.
    # Not a foreign key: catalog rows may disappear without touching personal copies.
    global_question_id = Column(Uuid, index=True, nullable=True)
    title = Column(Text, nullable=False)
    category_id = Column(Uuid, ForeignKey("category.id"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    answer = Column(Text, nullable=True)
    status = Column(SAEnum(QuestionStatus), default=QuestionStatus.unanswered, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    user = relationship("User", back_populates="questions")

    __table_args__ = (
        Index("ix_question_user_status", "user_id", "status"),
    )

    @property
    def origin(self) -> QuestionOrigin:
        if self.global_question_id is None:
            return CustomOrigin()
        return CatalogOrigin(self.global_question_id)


# ---------------------------
# USER SETTINGS
# ---------------------------
class AddressSettings(Base):
    __tablename__ = "address_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=True)
    phone = Column(String(64), nullable=True)
    country = Column(String(128), nullable=True)
    region = Column(String(128), nullable=True)
    city = Column(String(128), nullable=True)
    street = Column(String(200), nullable=True)
    building = Column(String(32), nullable=True)
    apartment = Column(String(32), nullable=True)
    postal_code = Column(String(32), nullable=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    user = relationship("User", back_populates="address_settings")

    FIELD_LABELS = (
        ("full_name", "Name"),
        ("phone", "Phone"),
        ("country", "Country"),
        ("region", "Region"),
        ("city", "City"),
        ("street", "Street"),
        ("building", "Building"),
        ("apartment", "Apartment"),
        ("postal_code", "Postal code"),
    )

    def labelled_lines(self) -> list[tuple[str, str]]:
        """(label, value) pairs for every filled-in field, in postal order."""
        out = []
        for attr, label in self.FIELD_LABELS:
            value = (getattr(self, attr, None) or "").strip()
            if value:
                out.append((label, value))
        return out


