# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
User endpoints – registration and public profile lookup.

Security notes
--------------
* The plaintext password is hashed here, before it reaches the store.
* New accounts are LOCKED; unlocking is done by a verification step that
  lives outside this service.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from core.errors import TransactionFailure, UniqueConstraintViolation
from core.security import hash_password
from user.dao import UserDao
from user.schemas import RegisterRequest, RegisterResponse, UserInfoResponse

router = APIRouter(prefix="/user", tags=["user"])


def get_user_dao(db: Session = Depends(get_db)) -> UserDao:
    return UserDao(db)


# ---------------------------------------------------------------------------
# POST /user/register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, dao: UserDao = Depends(get_user_dao)):
    params = body.model_copy(update={"password": hash_password(body.password)})
    try:
        return dao.user_register(params)
    except UniqueConstraintViolation:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already exists")
    except TransactionFailure as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ---------------------------------------------------------------------------
# GET /user/{username}
# ---------------------------------------------------------------------------


@router.get("/{username}", response_model=UserInfoResponse)
def user_info(username: str, dao: UserDao = Depends(get_user_dao)):
    """Public profile (no password hash)."""
    user = dao.find_user_by_name(username)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserInfoResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        is_locked=user.is_locked,
        scopes=[link.scope.name for link in user.scopes],
        created_at=user.created_at,
    )
