from typing import Optional

from fastapi import Depends, Header, Request

from evote.crud import get_account
from evote.database import AppContext
from evote.errors import Forbidden, NotFound, Unauthenticated
from evote.schemas import Role
from evote.security import decode_access_token


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_current_account(
    authorization: Optional[str] = Header(None),
    ctx: AppContext = Depends(get_context),
) -> dict:
    """Resolve ``Authorization: Bearer <token>`` to the stored account."""
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthenticated("Missing token")
    token = authorization[len("Bearer "):].strip()
    account_id = decode_access_token(token, ctx.settings)
    try:
        return get_account(ctx, account_id)
    except NotFound:
        raise Unauthenticated("User not found")


def require_role(role: Role):
    def checker(account: dict = Depends(get_current_account)) -> dict:
        if account.get("role") != role.value:
            raise Forbidden(f"User does not have {role.value} role")
        return account

    return checker


require_admin = require_role(Role.admin)
