# evote/config.py
# Central place for settings read from the environment / .env file
import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEV_SECRET_KEY = "dev_secret_change_me"

# Placeholder shown by the frontend when a candidate has no photo
DEFAULT_CANDIDATE_IMAGE = "https://via.placeholder.com/150"

ALGORITHM = "HS256"


class Settings:
    def __init__(
        self,
        mongo_uri: str = "mongodb://localhost:27017",
        mongo_db: str = "voting_app",
        secret_key: str = DEV_SECRET_KEY,
        token_expire_days: int = 7,
        bcrypt_rounds: int = 12,
        client_origin: str = "http://localhost:3000",
        log_level: str = "INFO",
    ):
        self.mongo_uri = mongo_uri
        self.mongo_db = mongo_db
        self.secret_key = secret_key
        self.token_expire_days = token_expire_days
        self.bcrypt_rounds = bcrypt_rounds
        self.client_origin = client_origin
        self.log_level = log_level

    def __repr__(self):
        # never print the secret
        return f"Settings(mongo_uri={self.mongo_uri!r}, mongo_db={self.mongo_db!r})"


def load_settings() -> Settings:
    secret_key = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET")
    if not secret_key:
        logger.warning("SECRET_KEY not set, falling back to the development key.")
        secret_key = DEV_SECRET_KEY

    return Settings(
        mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017"),
        mongo_db=os.getenv("MONGO_DB", "voting_app"),
        secret_key=secret_key,
        token_expire_days=int(os.getenv("TOKEN_EXPIRE_DAYS", "7")),
        bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
        client_origin=os.getenv("CLIENT_ORIGIN", "http://localhost:3000"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
