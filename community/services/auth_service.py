"""
Registration and login.
"""

from sqlalchemy.exc import IntegrityError

from community.constants import UserRole
from community.exceptions import Conflict, NotFound, ValidationError
from community.logging import get_logger
from community.models import User
from community.repositories import UserRepository
from community.schemas import LoginRequest, RegisterRequest
from community.security import TokenIssuer, hash_password, verify_password

logger = get_logger("auth")

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """
    Issues tokens for new and returning users.

    Usage:
        service = AuthService(UserRepository(session), issuer)
        user, token = service.register(RegisterRequest(...))
    """

    def __init__(self, user_repo: UserRepository, token_issuer: TokenIssuer, hash_rounds: int = 10):
        self.user_repo = user_repo
        self.token_issuer = token_issuer
        self.hash_rounds = hash_rounds

    def register(self, request: RegisterRequest) -> tuple[User, str]:
        """
        Create a member account and sign a token for it.

        Raises:
            Conflict: The email is already registered.
        """
        email = request.email.lower()
        if self.user_repo.email_exists(email):
            raise Conflict("User already exists")

        try:
            user = self.user_repo.create_user(
                username=request.username,
                email=email,
                password_hash=hash_password(request.password, rounds=self.hash_rounds),
                role=UserRole.MEMBER.value,
            )
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same email
            self.user_repo.session.rollback()
            raise Conflict("User already exists") from exc

        logger.info("user_registered", user_id=user.id)
        return user, self.token_issuer.issue(user.id, user.role)

    def login(self, request: LoginRequest) -> tuple[User, str]:
        """
        Check credentials and sign a token.

        Unknown email and wrong password fail identically.
        """
        user = self.user_repo.get_by_email(request.email.lower())
        if user is None or not verify_password(request.password, user.password_hash):
            logger.info("login_failed")
            raise ValidationError([{"field": "credentials", "message": INVALID_CREDENTIALS}], INVALID_CREDENTIALS)

        logger.info("user_logged_in", user_id=user.id)
        return user, self.token_issuer.issue(user.id, user.role)

    def get_user(self, user_id: int) -> User:
        user = self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user
