"""
Session tokens, password resets and team invitations.

Sessions are JWTs that are also persisted, so logout and password resets
can revoke them before the signature expires.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from bozo_bets.auth.passwords import hash_password, validate_password, verify_password
from bozo_bets.config.settings import AuthSettings
from bozo_bets.database.models import (
    PasswordReset,
    Team,
    TeamInvitation,
    User,
    UserSession,
    utcnow,
)
from bozo_bets.errors import NotFoundError, ValidationError


class AuthManager:
    """
    Issues and validates credentials for users.

    Example:
        >>> auth = AuthManager(settings.auth)
        >>> token = auth.create_session(db, user)
        >>> auth.validate_session(db, token).email
        'ken@example.com'
    """

    def __init__(self, settings: AuthSettings):
        self.settings = settings
        self.logger = logger.bind(component="auth")

    # =========================================================================
    # Passwords
    # =========================================================================

    def hash_password(self, password: str) -> str:
        return hash_password(password, rounds=self.settings.bcrypt_rounds)

    def verify_password(self, password: str, hashed_password: Optional[str]) -> bool:
        if not hashed_password:
            return False
        return verify_password(password, hashed_password)

    def authenticate(self, db: Session, email: str, password: str) -> Optional[User]:
        """Return the user for valid credentials, otherwise None."""
        user = db.scalar(select(User).where(User.email == email.strip().lower()))
        if user is None or not self.verify_password(password, user.password):
            return None
        return user

    # =========================================================================
    # Tokens and sessions
    # =========================================================================

    def generate_token(self, user: User) -> str:
        """Sign a JWT carrying the user's identity and privileges."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "is_admin": user.is_admin,
            "is_biggest_bozo": user.is_biggest_bozo,
            "jti": secrets.token_hex(8),
            "iat": now,
            "exp": now + timedelta(days=self.settings.session_days),
        }
        return jwt.encode(
            payload, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm
        )

    def decode_token(self, token: str) -> Optional[dict]:
        try:
            return jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
            )
        except jwt.ExpiredSignatureError:
            self.logger.debug("Rejected expired token")
            return None
        except jwt.InvalidTokenError:
            self.logger.debug("Rejected invalid token")
            return None

    def create_session(self, db: Session, user: User) -> str:
        """Persist a new session for the user and return its token."""
        token = self.generate_token(user)
        db.add(
            UserSession(
                user_id=user.id,
                token=token,
                expires_at=utcnow() + timedelta(days=self.settings.session_days),
            )
        )
        db.commit()
        return token

    def validate_session(
        self, db: Session, token: str, now: Optional[datetime] = None
    ) -> Optional[User]:
        """Return the session's user, or None if missing, expired or forged."""
        if self.decode_token(token) is None:
            return None

        session = db.scalar(select(UserSession).where(UserSession.token == token))
        if session is None or session.expires_at < (now or utcnow()):
            return None
        return db.get(User, session.user_id)

    def delete_session(self, db: Session, token: str) -> bool:
        result = db.execute(delete(UserSession).where(UserSession.token == token))
        db.commit()
        return result.rowcount > 0

    # =========================================================================
    # Password reset
    # =========================================================================

    def create_password_reset(self, db: Session, user: User) -> PasswordReset:
        reset = PasswordReset(
            user_id=user.id,
            token=secrets.token_hex(32),
            expires_at=utcnow() + timedelta(hours=self.settings.reset_token_hours),
        )
        db.add(reset)
        db.commit()
        self.logger.info(f"Password reset issued for user {user.id}")
        return reset

    def consume_password_reset(
        self,
        db: Session,
        token: str,
        new_password: str,
        now: Optional[datetime] = None,
    ) -> User:
        """
        Set a new password using a reset token.

        The token is marked used and every existing session of the user is
        revoked.

        Raises:
            ValidationError: Weak password, or an unknown/used/expired token
            NotFoundError: The token's user no longer exists
        """
        check = validate_password(new_password)
        if not check.is_valid:
            raise ValidationError("Password validation failed", details=check.errors)

        reset = db.scalar(
            select(PasswordReset).where(
                PasswordReset.token == token,
                PasswordReset.used.is_(False),
                PasswordReset.expires_at > (now or utcnow()),
            )
        )
        if reset is None:
            raise ValidationError("Invalid or expired reset token")

        user = db.get(User, reset.user_id)
        if user is None:
            raise NotFoundError("User not found")

        user.password = self.hash_password(new_password)
        reset.used = True
        db.execute(delete(UserSession).where(UserSession.user_id == user.id))
        db.commit()

        self.logger.info(f"Password reset completed for user {user.id}")
        return user

    # =========================================================================
    # Team invitations
    # =========================================================================

    def create_team_invitation(
        self, db: Session, team: Team, inviter: User, email: str
    ) -> TeamInvitation:
        invitation = TeamInvitation(
            team_id=team.id,
            email=email.strip().lower(),
            invited_by_id=inviter.id,
            token=secrets.token_hex(32),
            expires_at=utcnow() + timedelta(days=self.settings.invite_days),
        )
        db.add(invitation)
        db.commit()
        return invitation

    # =========================================================================
    # Admin bootstrap
    # =========================================================================

    def ensure_admin_user(
        self, db: Session, email: str, name: str, password: str
    ) -> User:
        """Create an admin account, or promote the existing user with that email."""
        email = email.strip().lower()
        user = db.scalar(select(User).where(User.email == email))

        if user is None:
            check = validate_password(password)
            if not check.is_valid:
                raise ValidationError("Password validation failed", details=check.errors)
            user = User(
                name=name,
                email=email,
                password=self.hash_password(password),
                is_admin=True,
            )
            db.add(user)
            self.logger.info(f"Admin user created: {email}")
        elif not user.is_admin:
            user.is_admin = True
            self.logger.info(f"Admin privileges granted to existing user: {email}")

        db.commit()
        return user
