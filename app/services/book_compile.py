# app/services/book_compile.py
"""Compile a user's answered questions into a PDF and mail it to the operator.

Three phases, so delivery can be deferred without touching aggregation:

* ``assemble_book``: pure read side; checks preconditions and builds the markup
* ``render_book``: markup → PDF through the renderer
* ``dispatch_book``: message + attachment through the delivery channel

``compile_book`` runs them in order and, by default, waits for delivery.
"""
import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from app.background import spawn
from app.errors import InsufficientContent, NotFound, PreconditionFailed, UpstreamFailure
from app.models import AddressSettings, Question, QuestionStatus, User
from app.services.access import Identity, authorize
from app.services.address import find_address
from app.services.mailer import Attachment, DeliveryChannel, DeliveryError
from app.services.questions import questions_for_user
from app.services.renderer import BOOK_LAYOUT, BookRenderer, RenderError
from app.settings.config import settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

DEFAULT_OPERATOR_INBOX = "rememory.notifications@yandex.ru"
BOOK_FILENAME = "answers.pdf"
BOOK_SUBJECT = "New book request"
MIN_ANSWERED = 1


@dataclass(frozen=True)
class BookManuscript:
    user_id: int
    email: str
    questions: list[Question]
    markup: str
    message_html: str


@dataclass(frozen=True)
class RenderedBook:
    filename: str
    content: bytes


@dataclass(frozen=True)
class BookDeliveryResult:
    user_id: int
    question_count: int
    recipient: str
    filename: str
    status: str  # "delivered" | "queued"


def order_for_book(questions: list[Question]) -> list[Question]:
    """Answered questions grouped by category id; ties keep their input order."""
    answered = [q for q in questions if q.status == QuestionStatus.answered]
    return sorted(answered, key=lambda q: q.category_id)


def render_manuscript(questions: list[Question]) -> str:
    return templates.get_template("book/manuscript.html").render({"questions": questions})


def render_request_message(email: str, address: AddressSettings, question_count: int) -> str:
    return templates.get_template("email/book_request.html").render({
        "email": email,
        "address_lines": address.labelled_lines(),
        "question_count": question_count,
    })


def book_recipient() -> str:
    return (settings.BOOK_RECIPIENT_EMAIL or "").strip() or DEFAULT_OPERATOR_INBOX


async def assemble_book(db: AsyncSession, user_id: int) -> BookManuscript:
    address = await find_address(db, user_id)
    if address is None:
        raise PreconditionFailed("Address settings are required before a book can be compiled")

    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User", user_id)

    ordered = order_for_book(await questions_for_user(db, user_id))
    if len(ordered) < MIN_ANSWERED:
        raise InsufficientContent(f"At least {MIN_ANSWERED} answered question is required to compile a book")

    return BookManuscript(
        user_id=user_id,
        email=user.email,
        questions=ordered,
        markup=render_manuscript(ordered),
        message_html=render_request_message(user.email, address, len(ordered)),
    )


async def render_book(manuscript: BookManuscript, renderer: BookRenderer) -> RenderedBook:
    try:
        content = await renderer.render(manuscript.markup, BOOK_LAYOUT)
    except RenderError as e:
        raise UpstreamFailure("renderer", str(e)) from e
    return RenderedBook(filename=BOOK_FILENAME, content=content)


async def dispatch_book(
    manuscript: BookManuscript,
    rendered: RenderedBook,
    channel: DeliveryChannel,
    recipient: str,
) -> None:
    try:
        await channel.send(
            recipient,
            BOOK_SUBJECT,
            manuscript.message_html,
            Attachment(filename=rendered.filename, content=rendered.content),
        )
    except DeliveryError as e:
        raise UpstreamFailure("delivery channel", str(e)) from e
    logger.info("Book for user %s delivered to %s", manuscript.user_id, recipient)


async def compile_book(
    db: AsyncSession,
    identity: Identity,
    user_id: int,
    renderer: BookRenderer,
    channel: DeliveryChannel,
    *,
    background: bool | None = None,
) -> BookDeliveryResult:
    authorize(identity, owner_id=user_id)
    if background is None:
        background = settings.BOOK_DELIVERY_MODE == "background"

    manuscript = await assemble_book(db, user_id)
    rendered = await render_book(manuscript, renderer)
    recipient = book_recipient()

    if background:
        spawn(dispatch_book(manuscript, rendered, channel, recipient), name=f"book-delivery-{user_id}")
        status = "queued"
    else:
        await dispatch_book(manuscript, rendered, channel, recipient)
        status = "delivered"

    logger.info("Compiled book for user %s: %d question(s), %s", user_id, len(manuscript.questions), status)
    return BookDeliveryResult(
        user_id=user_id,
        question_count=len(manuscript.questions),
        recipient=recipient,
        filename=rendered.filename,
        status=status,
    )
