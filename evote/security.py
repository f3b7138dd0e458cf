from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from evote.config import ALGORITHM, Settings
from evote.errors import Unauthenticated

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def configure_hashing(settings: Settings) -> None:
    """Apply the configured bcrypt cost. Called once when the app context is built."""
    pwd_context.update(bcrypt__rounds=settings.bcrypt_rounds)


# Hash a password
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


# Verify a plain password against a hash
def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """Spend the same time as a real check when the account does not exist."""
    pwd_context.dummy_verify()


# Create JWT access token
def create_access_token(account: dict, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": str(account["_id"]),
        "role": account.get("role"),
        "iat": now,
        "exp": now + timedelta(days=settings.token_expire_days),
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> str:
    """Return the account id bound to ``token``."""
    if not token:
        raise Unauthenticated("Token not provided")
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise Unauthenticated("Token expired")
    except JWTError:
        raise Unauthenticated("Invalid token")

    account_id = payload.get("sub")
    if not account_id:
        raise Unauthenticated("Invalid token")
    return account_id
