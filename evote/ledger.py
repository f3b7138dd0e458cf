"""Vote ledger and tally engine.

A voter's ``has_voted`` flag is the only guard against double voting. It is
flipped with a single conditional update (compare-and-set) before anything is
written to a candidate, so concurrent ``cast_vote`` calls for the same voter
have exactly one winner. The candidate's vote list and ``vote_count`` move
together in one document update and cannot drift apart.

The one window left open is between the claim and the tally: if the store
fails after the flag was set, the voter is marked as voted with no vote
recorded. That case is raised as ``InternalFailure`` and can be found later
with :func:`find_unrecorded_votes`.
"""
import logging
from datetime import datetime, timezone

from bson import ObjectId
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from evote.crud import parse_object_id
from evote.database import AppContext
from evote.errors import AlreadyVoted, Forbidden, InternalFailure, NotFound
from evote.models.vote_model import audit_record, vote_record
from evote.schemas import Role

logger = logging.getLogger(__name__)


def cast_vote(ctx: AppContext, voter_id, candidate_id) -> dict:
    """Record one vote from ``voter_id`` for ``candidate_id``.

    Returns a receipt ``{"candidate_id", "voted_at"}``.
    """
    voter_oid = parse_object_id(voter_id, "User")
    voter = ctx.accounts.find_one({"_id": voter_oid}, {"role": 1, "has_voted": 1})
    if not voter:
        raise NotFound("User not found")
    if voter.get("role") == Role.admin.value:
        raise Forbidden("Admin cannot vote")
    if voter.get("has_voted"):
        raise AlreadyVoted()

    candidate_oid = parse_object_id(candidate_id, "Candidate")
    if not ctx.candidates.find_one({"_id": candidate_oid}, {"_id": 1}):
        raise NotFound("Candidate not found")

    voted_at = datetime.now(timezone.utc)

    # Claim the ballot. Only one concurrent caller can see has_voted == False.
    claimed = ctx.accounts.find_one_and_update(
        {"_id": voter_oid, "role": Role.voter.value, "has_voted": False},
        {"$set": {"has_voted": True, "voted_at": voted_at}},
        projection={"_id": 1},
    )
    if claimed is None:
        logger.warning(f"Rejected second vote from {voter_oid}")
        raise AlreadyVoted()

    try:
        result = ctx.candidates.update_one(
            {"_id": candidate_oid},
            {
                "$push": {"votes": vote_record(voter_oid, voted_at)},
                "$inc": {"vote_count": 1},
            },
        )
    except PyMongoError as e:
        logger.error(f"Ballot of {voter_oid} claimed but not tallied for {candidate_oid}: {e}")
        raise InternalFailure("Your vote could not be confirmed. Please contact an administrator.")

    if result.matched_count == 0:
        # candidate deleted between lookup and tally
        logger.warning(f"Vote of {voter_oid} orphaned: candidate {candidate_oid} was removed")
        raise NotFound("Candidate not found")

    try:
        ctx.votes.insert_one(audit_record(voter_oid, candidate_oid, voted_at))
    except PyMongoError as e:
        logger.error(f"Audit record for vote of {voter_oid} not written: {e}")

    logger.info(f"Vote recorded for candidate {candidate_oid}")
    return {"candidate_id": str(candidate_oid), "voted_at": voted_at}


def compute_results(ctx: AppContext) -> list[dict]:
    """Tallies sorted by votes, highest first; ties keep creation order."""
    cursor = ctx.candidates.find({}, {"name": 1, "party": 1, "vote_count": 1, "created_at": 1}).sort(
        [("created_at", ASCENDING), ("_id", ASCENDING)]
    )
    rows = [
        {"name": c["name"], "party": c["party"], "votes": c.get("vote_count", 0)}
        for c in cursor
    ]
    # sorted() is stable
    return sorted(rows, key=lambda row: row["votes"], reverse=True)


def find_unrecorded_votes(ctx: AppContext) -> list[dict]:
    """Voters flagged as having voted whose vote is on no candidate."""
    recorded: set[ObjectId] = set()
    for candidate in ctx.candidates.find({}, {"votes": 1}):
        recorded.update(v["voter_id"] for v in candidate.get("votes", []))

    unrecorded = []
    for voter in ctx.accounts.find({"has_voted": True}, {"voted_at": 1}).sort("_id", ASCENDING):
        if voter["_id"] not in recorded:
            unrecorded.append({"voter_id": str(voter["_id"]), "voted_at": voter.get("voted_at")})
    return unrecorded
