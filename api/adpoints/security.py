import bcrypt
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from .errors import TokenMissing, TokenInvalid, ValidationError

ALGO = "HS256"
BCRYPT_MAX_BYTES = 72


def hash_password(plaintext: str, rounds: int = 10) -> str:
    raw = plaintext.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        raise ValidationError("Password too long")
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plaintext: str, password_hash: str) -> bool:
    raw = plaintext.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(raw, password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise TokenMissing()
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise TokenMissing()
    return token


@dataclass(frozen=True)
class TokenClaims:
    id: int
    role: str


class TokenService:
    """Signs and checks session tokens carrying {id, role}."""

    def __init__(self, secret: str, hours: int = 24):
        self.secret = secret
        self.hours = hours

    def issue(self, user, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        exp = now + timedelta(hours=self.hours)
        payload = {"id": user.id, "role": user.role, "iat": int(now.timestamp()), "exp": int(exp.timestamp())}
        return jwt.encode(payload, self.secret, algorithm=ALGO)

    def verify(self, token: str | None) -> TokenClaims:
        if not token:
            raise TokenMissing()
        try:
            payload = jwt.decode(token, self.secret, algorithms=[ALGO])
        except JWTError:
            raise TokenInvalid()
        user_id, role = payload.get("id"), payload.get("role")
        if not isinstance(user_id, int) or not isinstance(role, str):
            raise TokenInvalid()
        return TokenClaims(id=user_id, role=role)
