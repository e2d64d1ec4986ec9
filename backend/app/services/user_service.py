"""
RedSocial Backend — User Service (User Directory)
===================================================

What:  Registration, credential verification, lookups and profile edits.
Who:   Called by the users routes, by AuthService (/auth endpoints and
       token resolution) and by the other services for existence checks.

Uniqueness:
    register() and edit_details() pre-check username/email so the common
    case gets a precise message, but the UNIQUE constraints on the users
    table are what actually guarantee uniqueness. A racing insert fails
    at flush time with IntegrityError, which is re-raised as ConflictError.

Sessions:
    There is no "currently logged in user" held by this service. login()
    issues a signed token; each later request is authenticated from that
    token alone (see AuthService.resolve_identity).
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from app.models.user import User
from app.schemas.auth import Identity
from app.schemas.user import LoginResponse, UserResponse
from app.security import create_access_token, hash_password, verify_password
from app.services.permissions import ensure_acting_user

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for user accounts.

    Responsibilities:
        - register(): create an account with a hashed password
        - authenticate() / login(): verify credentials, issue a token
        - get_by_username() / get_by_id() / list_all(): reads
        - edit_details(): partial profile update (description, email)
        - require_user(): ORM lookup used by other services

    Every public read returns UserResponse, which has no password field.
    """

    # ── Lookups ───────────────────────────────────────────────────────────

    async def find_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def require_user(self, db: AsyncSession, user_id: int) -> User:
        """
        Load a user entity or raise NotFoundError.

        Used by the follow, publication and comment services to validate
        user ids taken from the request path.
        """
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user

    # ── Registration & Login ──────────────────────────────────────────────

    async def register(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str,
        description: Optional[str] = None,
    ) -> UserResponse:
        """
        Create a new account.

        Steps:
            1. Reject if the username or email is already taken (ConflictError)
            2. Reject passwords shorter than PASSWORD_MIN_LENGTH (ValidationError)
            3. Hash the password (bcrypt, in a worker thread)
            4. Insert and flush to obtain the id and creation timestamp

        Raises:
            ConflictError: username or email in use (pre-check or constraint)
            ValidationError: password too short
            DatabaseError: unexpected database failure
        """
        try:
            result = await db.execute(
                select(User.id)
                .where(or_(User.username == username, User.email == email))
                .limit(1)
            )
            if result.scalar_one_or_none() is not None:
                raise ConflictError(
                    message="Username or email already in use",
                    context={"username": username, "email": email},
                )

            if len(password) < settings.password_min_length:
                raise ValidationError(
                    message=f"Password must be at least {settings.password_min_length} characters long",
                    field="password",
                )

            # bcrypt blocks; hash in a worker thread
            password_hash = await run_in_threadpool(hash_password, password)

            user = User(
                username=username,
                email=email,
                password_hash=password_hash,
                description=description,
            )
            db.add(user)
            await db.flush()

        except IntegrityError as e:
            raise ConflictError(
                message="Username or email already in use",
                context={"username": username, "email": email},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", username, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not register the user. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("User registered: %s (id=%d)", user.username, user.id)
        return UserResponse.model_validate(user)

    async def authenticate(self, db: AsyncSession, username: str, password: str) -> User:
        """
        Verify a username/password pair.

        Raises:
            NotFoundError: no account with this username
            UnauthorizedError: the password does not match the stored hash
        """
        user = await self.find_by_username(db, username)
        if user is None:
            raise NotFoundError(resource="user", resource_id=username)

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.warning("Failed login for user %s", username)
            raise UnauthorizedError(message="Invalid credentials")

        return user

    def issue_token(self, user: User) -> str:
        """Sign an access token whose subject is the user's username."""
        return create_access_token(subject=user.username, extra_claims={"userId": user.id})

    async def login(self, db: AsyncSession, username: str, password: str) -> LoginResponse:
        """Authenticate and return the user together with a fresh access token."""
        user = await self.authenticate(db, username, password)
        logger.info("User logged in: %s (id=%d)", user.username, user.id)
        return LoginResponse(
            **UserResponse.model_validate(user).model_dump(),
            access_token=self.issue_token(user),
        )

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_by_username(self, db: AsyncSession, username: str) -> UserResponse:
        user = await self.find_by_username(db, username)
        if user is None:
            raise NotFoundError(resource="user", resource_id=username)
        return UserResponse.model_validate(user)

    async def get_by_id(self, db: AsyncSession, user_id: int) -> UserResponse:
        user = await self.require_user(db, user_id)
        return UserResponse.model_validate(user)

    async def list_all(self, db: AsyncSession) -> List[UserResponse]:
        result = await db.execute(select(User).order_by(User.id))
        return [UserResponse.model_validate(user) for user in result.scalars().all()]

    # ── Profile Edits ─────────────────────────────────────────────────────

    async def edit_details(
        self,
        db: AsyncSession,
        actor: Identity,
        user_id: int,
        new_description: Optional[str] = None,
        new_email: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Update the description and/or email of a user.

        None means "leave unchanged". Returns only the fields that were
        provided, keyed by their wire names (newDescription, newEmail).

        Raises:
            ForbiddenError: caller is not the user being edited
            NotFoundError: no such user
            ConflictError: new email belongs to another user
        """
        ensure_acting_user(actor, user_id, "edit profile details")
        user = await self.require_user(db, user_id)
        changed: Dict[str, str] = {}

        try:
            if new_email is not None and new_email != user.email:
                result = await db.execute(
                    select(User.id).where(User.email == new_email, User.id != user_id)
                )
                if result.scalar_one_or_none() is not None:
                    raise ConflictError(
                        message="Email already in use",
                        context={"email": new_email},
                    )

            if new_description is not None:
                user.description = new_description
                changed["newDescription"] = new_description
            if new_email is not None:
                user.email = new_email
                changed["newEmail"] = new_email

            await db.flush()

        except IntegrityError as e:
            raise ConflictError(
                message="Email already in use",
                context={"email": new_email},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error editing user %d: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update user details. Please try again.",
                context={"user_id": user_id},
            ) from e

        logger.info("User %d updated fields: %s", user_id, ", ".join(changed) or "none")
        return changed


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
