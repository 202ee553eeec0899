from collections.abc import Callable, Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.permissions import can_manage_departments, can_mutate_timetable
from app.core.security import decode_token
from app.db.session import SessionLocal
from app.models.user import User
from app.services.timetable_service import TimetableService
from app.services.timetable_store import SqlAlchemyTimetableStore

security = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token)
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError as exc:
        raise credentials_exception from exc

    user = db.get(User, user_id)
    if user is None:
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    return user


def require_capability(predicate: Callable[[User], bool]) -> Callable[[User], User]:
    def capability_checker(current_user: User = Depends(get_current_user)) -> User:
        if not predicate(current_user):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return capability_checker


require_timetable_writer = require_capability(can_mutate_timetable)
require_department_admin = require_capability(can_manage_departments)


def get_timetable_service(db: Session = Depends(get_db)) -> TimetableService:
    return TimetableService(SqlAlchemyTimetableStore(db))
