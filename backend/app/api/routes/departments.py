from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_department_admin
from app.models.department import Department
from app.models.grade import Grade
from app.models.professor import Professor
from app.models.user import User
from app.schemas.department import DepartmentCreate, DepartmentDetailOut, DepartmentOut, DepartmentUpdate
from app.schemas.stats import DepartmentStatsOut
from app.services.audit import record_audit
from app.services.references import commit_or_conflict, ensure_no_dependents, get_or_404
from app.services.stats import department_detail, department_stats

router = APIRouter()

DUPLICATE_MESSAGE = "Department with this name or code already exists"
IN_USE_MESSAGE = "Cannot delete department with associated grades or professors"


@router.get("/", response_model=list[DepartmentOut])
def list_departments(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[DepartmentOut]:
    return list(db.execute(select(Department).order_by(Department.name)).scalars())


@router.get("/{department_id}", response_model=DepartmentDetailOut)
def get_department(
    department_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DepartmentDetailOut:
    return department_detail(db, get_or_404(db, Department, department_id, "Department"))


@router.get("/{department_id}/stats", response_model=DepartmentStatsOut)
def get_department_stats(
    department_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DepartmentStatsOut:
    get_or_404(db, Department, department_id, "Department")
    return department_stats(db, department_id)


@router.post("/", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
def create_department(
    payload: DepartmentCreate,
    current_user: User = Depends(require_department_admin),
    db: Session = Depends(get_db),
) -> DepartmentOut:
    department = Department(**payload.model_dump())
    db.add(department)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(department)
    return department


@router.put("/{department_id}", response_model=DepartmentOut)
def update_department(
    department_id: int,
    payload: DepartmentUpdate,
    current_user: User = Depends(require_department_admin),
    db: Session = Depends(get_db),
) -> DepartmentOut:
    department = get_or_404(db, Department, department_id, "Department")
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(department, key, value)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(department)
    return department


@router.delete("/{department_id}")
def delete_department(
    department_id: int,
    current_user: User = Depends(require_department_admin),
    db: Session = Depends(get_db),
) -> dict:
    department = get_or_404(db, Department, department_id, "Department")
    ensure_no_dependents(
        db,
        IN_USE_MESSAGE,
        (Grade.department_id, department_id),
        (Professor.department_id, department_id),
    )
    record_audit(db, actor=current_user, action="department.delete", entity_type="department", entity_id=department_id)
    db.delete(department)
    commit_or_conflict(db, IN_USE_MESSAGE)
    return {"success": True}
