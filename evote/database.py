# evote/database.py
import logging
from typing import Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection

from evote.config import Settings
from evote.security import configure_hashing

logger = logging.getLogger(__name__)

ACCOUNTS_COLLECTION_NAME = "accounts"
CANDIDATES_COLLECTION_NAME = "candidates"
VOTES_COLLECTION_NAME = "votes"


class AppContext:
    """Store handle and settings shared by every operation.

    Built once at startup and closed at shutdown. Pass an existing client
    (e.g. a mongomock client in tests) to skip connecting to a real server.
    """

    def __init__(self, settings: Settings, client: Optional[MongoClient] = None):
        self.settings = settings
        configure_hashing(settings)
        self._owns_client = client is None
        try:
            if client is None:
                client = MongoClient(settings.mongo_uri)
                # Test connection
                client.admin.command("ping")
                logger.info(f"Connected to MongoDB at {settings.mongo_uri}, database: {settings.mongo_db}")
            self.client = client
            self.db = client[settings.mongo_db]
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

        self.accounts: Collection = self.db[ACCOUNTS_COLLECTION_NAME]
        self.candidates: Collection = self.db[CANDIDATES_COLLECTION_NAME]
        self.votes: Collection = self.db[VOTES_COLLECTION_NAME]
        self.ensure_indexes()

    def ensure_indexes(self):
        # Create unique indexes
        self.accounts.create_index("identity_number", unique=True)
        # "admin" for the admin account, "voter:<identity>" otherwise
        self.accounts.create_index("role_slot", unique=True)
        self.candidates.create_index([("created_at", ASCENDING), ("_id", ASCENDING)])
        self.candidates.create_index("votes.voter_id")
        self.votes.create_index("voter_id")

    def close(self):
        if not self._owns_client:
            return
        try:
            self.client.close()
            logger.info("MongoDB connection closed")
        except Exception as e:
            logger.error(f"Error closing MongoDB connection: {e}")
