from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from evote.config import DEFAULT_CANDIDATE_IMAGE


class CandidateCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, examples=["Asha Rao"])
    party: str = Field(..., min_length=1, examples=["Independent"])
    age: int = Field(..., ge=0)
    image_url: Optional[str] = None


class CandidateUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1)
    party: Optional[str] = Field(None, min_length=1)
    age: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None


class CandidateOut(BaseModel):
    """Public view of a candidate. Vote records stay private."""

    id: str
    name: str
    party: str
    age: int
    image_url: str = DEFAULT_CANDIDATE_IMAGE
    vote_count: int = 0

    @classmethod
    def from_document(cls, doc: dict) -> "CandidateOut":
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            party=doc["party"],
            age=doc["age"],
            image_url=doc.get("image_url") or DEFAULT_CANDIDATE_IMAGE,
            vote_count=doc.get("vote_count", 0),
        )


class CandidateResponse(BaseModel):
    success: bool = True
    message: str
    candidate: CandidateOut


class CandidateListResponse(BaseModel):
    success: bool = True
    candidates: List[CandidateOut]
