from fastapi import APIRouter, Depends

from evote import crud, ledger
from evote.database import AppContext
from evote.dependencies import get_context, get_current_account, require_admin
from evote.models.candidate_model import (
    CandidateCreate,
    CandidateListResponse,
    CandidateOut,
    CandidateResponse,
    CandidateUpdate,
)
from evote.schemas import (
    MessageResponse,
    ReconcileResponse,
    ResultsResponse,
    VoteResponse,
)

router = APIRouter(prefix="/api/candidate", tags=["Candidate"])


# ------------------------------
# PUBLIC: LIST CANDIDATES
# ------------------------------
@router.get("", response_model=CandidateListResponse)
@router.get("/", response_model=CandidateListResponse, include_in_schema=False)
def list_candidates(ctx: AppContext = Depends(get_context)):
    candidates = [CandidateOut.from_document(c) for c in crud.list_candidates(ctx)]
    return CandidateListResponse(candidates=candidates)


# ------------------------------
# ADMIN: MANAGE CANDIDATES
# ------------------------------
@router.post("", response_model=CandidateResponse, status_code=201)
@router.post("/", response_model=CandidateResponse, status_code=201, include_in_schema=False)
def add_candidate(
    data: CandidateCreate,
    admin: dict = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    candidate = crud.add_candidate(ctx, data)
    return CandidateResponse(
        message="Candidate added successfully",
        candidate=CandidateOut.from_document(candidate),
    )


@router.put("/{candidate_id}", response_model=CandidateResponse)
def update_candidate(
    candidate_id: str,
    patch: CandidateUpdate,
    admin: dict = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    candidate = crud.update_candidate(ctx, candidate_id, patch)
    return CandidateResponse(
        message="Candidate updated successfully",
        candidate=CandidateOut.from_document(candidate),
    )


@router.delete("/{candidate_id}", response_model=MessageResponse)
def delete_candidate(
    candidate_id: str,
    admin: dict = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    crud.remove_candidate(ctx, candidate_id)
    return MessageResponse(message="Candidate deleted successfully")


# ------------------------------
# VOTER: CAST VOTE
# ------------------------------
@router.post("/vote/{candidate_id}", response_model=VoteResponse)
def cast_vote(
    candidate_id: str,
    account: dict = Depends(get_current_account),
    ctx: AppContext = Depends(get_context),
):
    receipt = ledger.cast_vote(ctx, account["_id"], candidate_id)
    return VoteResponse(message="Vote recorded successfully", receipt=receipt)


# ------------------------------
# ADMIN: RESULTS
# ------------------------------
@router.get("/results", response_model=ResultsResponse)
def get_results(admin: dict = Depends(require_admin), ctx: AppContext = Depends(get_context)):
    return ResultsResponse(results=ledger.compute_results(ctx))


@router.get("/reconcile", response_model=ReconcileResponse)
def reconcile(admin: dict = Depends(require_admin), ctx: AppContext = Depends(get_context)):
    """Voters marked as voted whose vote never reached a candidate."""
    return ReconcileResponse(unrecorded=ledger.find_unrecorded_votes(ctx))
