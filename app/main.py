import os
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_users.password import PasswordHelper
from sqlalchemy import select

from .background import drain, pending_tasks
from .database import init_db, async_session_maker
from .errors import install_error_handlers
from .models import User
from .routers import categories, questions, user
from .schemas import UserCreate, UserRead
from .services.catalog import ensure_default_category
from .users import fastapi_users, auth_backend

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="Memoir Books")

# Enable CORS if needed
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Update for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

# ----------------------
# Route Includes
# ----------------------
app.include_router(questions.router)
app.include_router(categories.router)
app.include_router(user.router)

# Authentication Routes
app.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/auth/jwt",
    tags=["auth"]
)

app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["auth"]
)

# ----------------------
# Auto-create admin user
# ----------------------
async def create_admin_user():
    admin_email = os.getenv("ADMIN_EMAIL")
    admin_password = os.getenv("ADMIN_PASSWORD")

    if not admin_email or not admin_password:
        logger.warning("ADMIN_EMAIL or ADMIN_PASSWORD not set, skipping admin creation.")
        return

    async with async_session_maker() as session:
        result = await session.execute(select(User).where(User.email == admin_email))
        existing_admin = result.scalars().first()
        if not existing_admin:
            session.add(User(
                email=admin_email,
                hashed_password=PasswordHelper().hash(admin_password),
                is_superuser=True,
                is_active=True,
                is_verified=True,
            ))
            await session.commit()
            logger.info("Admin user created: %s", admin_email)
        else:
            logger.info("Admin user already exists: %s", admin_email)


async def seed_catalog():
    try:
        async with async_session_maker() as db:
            await ensure_default_category(db)
    except Exception:
        logger.exception("Default category seed failed")


@app.on_event("startup")
async def on_startup():
    await init_db()
    await create_admin_user()
    await seed_catalog()


@app.on_event("shutdown")
async def on_shutdown():
    # let deferred book deliveries finish
    if pending_tasks():
        logger.info("Waiting for %d background delivery task(s)", pending_tasks())
    await drain(timeout=60)
    if pending_tasks():
        logger.warning("%d background task(s) still running at shutdown", pending_tasks())


@app.get("/health")
async def health():
    return {"status": "ok"}
