from fastapi import APIRouter, Depends

from evote import crud
from evote.database import AppContext
from evote.dependencies import get_context, get_current_account
from evote.schemas import (
    AccountCreate,
    AccountOut,
    AccountSummary,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    ProfileResponse,
)
from evote.security import create_access_token

router = APIRouter(prefix="/api/user", tags=["User"])


def _summary(account: dict) -> AccountSummary:
    return AccountSummary(id=str(account["_id"]), name=account["name"], role=account["role"])


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(data: AccountCreate, ctx: AppContext = Depends(get_context)):
    account = crud.create_account(ctx, data)
    return AuthResponse(
        message="User registered successfully",
        user=_summary(account),
        token=create_access_token(account, ctx.settings),
    )


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, ctx: AppContext = Depends(get_context)):
    account = crud.authenticate(ctx, data.identity_number, data.password)
    return AuthResponse(
        message="Login successful",
        user=_summary(account),
        token=create_access_token(account, ctx.settings),
    )


@router.get("/profile", response_model=ProfileResponse)
def profile(account: dict = Depends(get_current_account)):
    return ProfileResponse(user=AccountOut.from_document(account))


@router.put("/profile/password", response_model=MessageResponse)
def update_password(
    data: PasswordChangeRequest,
    account: dict = Depends(get_current_account),
    ctx: AppContext = Depends(get_context),
):
    crud.change_password(ctx, account, data.current_password, data.new_password)
    return MessageResponse(message="Password updated successfully")
