from datetime import datetime
from bson import ObjectId


def vote_record(voter_id: ObjectId, voted_at: datetime) -> dict:
    # embedded in candidate.votes
    return {"voter_id": voter_id, "voted_at": voted_at}


def audit_record(voter_id: ObjectId, candidate_id: ObjectId, voted_at: datetime) -> dict:
    # standalone copy in the votes collection, traceability only
    return {"voter_id": voter_id, "candidate_id": candidate_id, "created_at": voted_at}
