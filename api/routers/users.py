"""League member endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import get_db
from bozo_bets.database.schemas import UserCreate, UserResponse, UserUpdate
from bozo_bets.tracking import create_member, delete_user, list_users, update_user_team

router = APIRouter()


@router.get("/users", response_model=list[UserResponse])
async def get_users(db: Session = Depends(get_db)) -> list[UserResponse]:
    """All users, newest first, with their team."""
    return [UserResponse.model_validate(user) for user in list_users(db)]


@router.post("/users", response_model=UserResponse, status_code=201)
async def add_user(body: UserCreate, db: Session = Depends(get_db)) -> UserResponse:
    """Add a member by name; the email is generated from the name."""
    user = create_member(db, body.name, team_id=body.team_id)
    return UserResponse.model_validate(user)


@router.put("/users/{user_id}", response_model=UserResponse)
async def change_team(
    user_id: int, body: UserUpdate, db: Session = Depends(get_db)
) -> UserResponse:
    user = update_user_team(db, user_id, body.team_id)
    return UserResponse.model_validate(user)


@router.delete("/users/{user_id}")
async def remove_user(user_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    delete_user(db, user_id)
    return {"success": True, "message": "User deleted successfully"}
