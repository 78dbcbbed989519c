from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.exceptions import DuplicateError, NotFoundError
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserOut

router = APIRouter()


@router.get("/", response_model=list[UserOut])
def list_users(role: UserRole | None = Query(default=None), db: Session = Depends(get_db)) -> list[UserOut]:
    query = select(User).order_by(User.last_name, User.first_name)
    if role is not None:
        query = query.where(User.role == role)
    return list(db.execute(query).scalars())


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)) -> UserOut:
    conditions = [User.email == payload.email]
    if payload.employee_id:
        conditions.append(User.employee_id == payload.employee_id)
    existing = db.execute(select(User).where(or_(*conditions))).scalars().first()
    if existing:
        raise DuplicateError("Email or employee ID already registered", details={"user_id": existing.id})
    user = User(**payload.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)) -> UserOut:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user
