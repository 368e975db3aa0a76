from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
from jose import jwt


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, stored_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash
        return False


def create_token(
    *, subject: Dict[str, Any], secret_key: str, expires_minutes: int, algorithm: str = "HS256"
) -> str:
    now = datetime.now(timezone.utc)
    claims = {**subject, "iat": int(now.timestamp()), "exp": now + timedelta(minutes=expires_minutes)}
    return jwt.encode(claims, secret_key, algorithm=algorithm)


def decode_token(token: str, secret_key: str, algorithm: str = "HS256") -> Dict[str, Any]:
    """Decode and verify a token. Raises ``jose.JWTError`` when invalid or expired."""
    return jwt.decode(token, secret_key, algorithms=[algorithm])
