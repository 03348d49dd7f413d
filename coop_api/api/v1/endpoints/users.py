"""User endpoints."""

from fastapi import APIRouter, Depends

from coop_api.core.security import get_current_user
from coop_api.models import User
from coop_api.schemas.user import UserRead

router: APIRouter = APIRouter()


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)
