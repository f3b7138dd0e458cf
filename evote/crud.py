import logging
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from evote.config import DEFAULT_CANDIDATE_IMAGE
from evote.database import AppContext
from evote.errors import Conflict, NotFound, Unauthenticated, ValidationError
from evote.models.candidate_model import CandidateCreate, CandidateUpdate
from evote.schemas import AccountCreate, Role
from evote.security import dummy_verify, hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid identity number or password"


def parse_object_id(value, what: str = "Record") -> ObjectId:
    """Malformed ids are reported the same way as unknown ones."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFound(f"{what} not found")


def _role_slot(role: str, identity_number: str) -> str:
    return "admin" if role == Role.admin.value else f"voter:{identity_number}"


# ------------------------------
# Accounts
# ------------------------------

def create_account(ctx: AppContext, data: AccountCreate) -> dict:
    """Register a new account and return the stored document."""
    account = data.model_dump()
    account["role"] = data.role.value

    if ctx.accounts.find_one({"identity_number": data.identity_number}, {"_id": 1}):
        raise Conflict("User with this identity number already exists", code="duplicate_identity")
    if data.role == Role.admin and ctx.accounts.find_one({"role": Role.admin.value}, {"_id": 1}):
        raise Conflict("Admin user already exists", code="duplicate_admin")

    account["password_hash"] = hash_password(account.pop("password"))
    account["has_voted"] = False
    account["role_slot"] = _role_slot(account["role"], data.identity_number)
    account["created_at"] = datetime.now(timezone.utc)

    try:
        result = ctx.accounts.insert_one(account)
    except DuplicateKeyError:
        # lost a race with a concurrent registration
        if ctx.accounts.find_one({"identity_number": data.identity_number}, {"_id": 1}):
            raise Conflict("User with this identity number already exists", code="duplicate_identity")
        raise Conflict("Admin user already exists", code="duplicate_admin")

    logger.info(f"Registered {account['role']} account {result.inserted_id}")
    return ctx.accounts.find_one({"_id": result.inserted_id})


def get_account(ctx: AppContext, account_id) -> dict:
    account = ctx.accounts.find_one({"_id": parse_object_id(account_id, "User")})
    if not account:
        raise NotFound("User not found")
    return account


def authenticate(ctx: AppContext, identity_number: str, password: str) -> dict:
    account = ctx.accounts.find_one({"identity_number": identity_number})
    if not account:
        dummy_verify()
        logger.warning("Login attempt for unknown identity number")
        raise Unauthenticated(INVALID_CREDENTIALS)
    if not verify_password(password, account.get("password_hash")):
        logger.warning(f"Wrong password for account {account['_id']}")
        raise Unauthenticated(INVALID_CREDENTIALS)
    return account


def change_password(ctx: AppContext, account: dict, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, account.get("password_hash")):
        raise Unauthenticated("Invalid current password")
    ctx.accounts.update_one(
        {"_id": account["_id"]},
        {"$set": {"password_hash": hash_password(new_password)}},
    )
    logger.info(f"Password changed for account {account['_id']}")


# ------------------------------
# Candidates
# ------------------------------

def add_candidate(ctx: AppContext, data: CandidateCreate) -> dict:
    candidate = data.model_dump()
    candidate["image_url"] = candidate.get("image_url") or DEFAULT_CANDIDATE_IMAGE
    candidate["votes"] = []
    candidate["vote_count"] = 0
    candidate["created_at"] = datetime.now(timezone.utc)

    result = ctx.candidates.insert_one(candidate)
    logger.info(f"Candidate {result.inserted_id} ({data.name}) added")
    return ctx.candidates.find_one({"_id": result.inserted_id}, {"votes": 0})


def update_candidate(ctx: AppContext, candidate_id, patch: CandidateUpdate) -> dict:
    oid = parse_object_id(candidate_id, "Candidate")
    fields = patch.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        raise ValidationError("No candidate fields to update")

    updated = ctx.candidates.find_one_and_update(
        {"_id": oid},
        {"$set": fields},
        projection={"votes": 0},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise NotFound("Candidate not found")
    logger.info(f"Candidate {oid} updated: {sorted(fields)}")
    return updated


def remove_candidate(ctx: AppContext, candidate_id) -> None:
    oid = parse_object_id(candidate_id, "Candidate")
    result = ctx.candidates.delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFound("Candidate not found")
    logger.info(f"Candidate {oid} deleted")


def list_candidates(ctx: AppContext) -> list[dict]:
    """Candidates in creation order, without their vote records."""
    cursor = ctx.candidates.find({}, {"votes": 0}).sort(
        [("created_at", ASCENDING), ("_id", ASCENDING)]
    )
    return list(cursor)
