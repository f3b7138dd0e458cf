from datetime import datetime
from enum import Enum
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, EmailStr, Field

IDENTITY_NUMBER_PATTERN = r"^[0-9]{12}$"


def _number_to_str(value):
    # older clients send the identity number as a JSON number
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


IdentityNumber = Annotated[str, BeforeValidator(_number_to_str)]

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _fits_bcrypt(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return value


Password = Annotated[str, AfterValidator(_fits_bcrypt)]


class Role(str, Enum):
    voter = "voter"
    admin = "admin"


# --- Account Schemas ---
class AccountBase(BaseModel):
    name: str = Field(..., min_length=1)
    age: int = Field(..., ge=0)
    address: str = Field(..., min_length=1)
    identity_number: IdentityNumber = Field(..., pattern=IDENTITY_NUMBER_PATTERN, examples=["123456789012"])
    email: Optional[EmailStr] = None
    mobile: Optional[str] = None


class AccountCreate(AccountBase):
    password: Password = Field(..., min_length=6)
    role: Role = Role.voter


class AccountOut(AccountBase):
    id: str
    role: Role
    has_voted: bool = False

    @classmethod
    def from_document(cls, doc: dict) -> "AccountOut":
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            age=doc["age"],
            address=doc["address"],
            identity_number=doc["identity_number"],
            email=doc.get("email"),
            mobile=doc.get("mobile"),
            role=doc["role"],
            has_voted=doc.get("has_voted", False),
        )


class AccountSummary(BaseModel):
    id: str
    name: str
    role: Role


class LoginRequest(BaseModel):
    identity_number: IdentityNumber = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: Password = Field(..., min_length=6)


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: AccountSummary
    token: str


class ProfileResponse(BaseModel):
    success: bool = True
    user: AccountOut


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# --- Results Schemas ---
class ResultRow(BaseModel):
    name: str
    party: str
    votes: int


class ResultsResponse(BaseModel):
    success: bool = True
    results: list[ResultRow]


class VoteReceipt(BaseModel):
    candidate_id: str
    voted_at: datetime


class VoteResponse(MessageResponse):
    receipt: VoteReceipt


class UnrecordedVote(BaseModel):
    voter_id: str
    voted_at: Optional[datetime] = None


class ReconcileResponse(BaseModel):
    success: bool = True
    unrecorded: list[UnrecordedVote]
