import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from .errors import DuplicateUsername, InvalidCredentials, UserNotFound
from .models import User, ROLE_ADMIN, ROLE_USER
from .security import hash_password, verify_password

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise UserNotFound()
    return user


def find_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def register(db: Session, username: str, password: str, role: str = ROLE_USER, rounds: int = 10) -> int:
    """Create a user and return its id. Uniqueness is enforced by the table."""
    user = User(username=username, password_hash=hash_password(password, rounds), role=role, points=0)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateUsername()
    logger.info("Registered user %s (id=%s, role=%s)", username, user.id, role)
    return user.id


def authenticate(db: Session, username: str, password: str) -> User:
    user = find_by_username(db, username)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %r", username)
        raise InvalidCredentials()
    return user


def bootstrap_admin(db: Session, username: str | None, password: str | None, rounds: int = 10) -> bool:
    """Create the configured admin once. Returns True when an account was created."""
    if not username or not password:
        return False
    if find_by_username(db, username):
        logger.info("Admin account %s already present", username)
        return False
    try:
        register(db, username, password, role=ROLE_ADMIN, rounds=rounds)
    except DuplicateUsername:
        # another worker created it first
        return False
    logger.info("Admin account created")
    return True
