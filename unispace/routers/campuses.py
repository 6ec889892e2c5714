from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from unispace.db import get_db
from unispace.errors import BadRequestError, ConflictError, NotFoundError
from unispace.models.campus import Campus
from unispace.models.room import Room
from unispace.schemas.campus import CampusCreate, CampusResponse, CampusUpdate
from unispace.utils.auth import CurrentActor, require_admin
from unispace.utils.clock import system_clock
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/campuses",
    tags=["campuses"],
)


def _get_campus(db: Session, campus_id: int) -> Campus:
    campus = db.query(Campus).filter(Campus.id == campus_id).first()
    if not campus:
        raise NotFoundError("Campus not found")
    return campus


def _ensure_unique_name(db: Session, name: str, exclude_id: int = None):
    query = db.query(Campus).filter(Campus.name == name)
    if exclude_id is not None:
        query = query.filter(Campus.id != exclude_id)
    if query.first():
        raise ConflictError(f"Campus '{name}' already exists")


@router.post("/", response_model=CampusResponse, status_code=status.HTTP_201_CREATED)
def create_campus(
    campus: CampusCreate,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_admin),
):
    """
    Create a campus.
    Admin only.
    """
    name = campus.name.strip()
    _ensure_unique_name(db, name)
    db_campus = Campus(
        name=name,
        address=campus.address,
        created_at=system_clock.now(),
        created_by=actor.user_id,
    )
    db.add(db_campus)
    db.commit()
    db.refresh(db_campus)
    logger.info(f"Campus created: {db_campus.id}")
    return db_campus


@router.get("/", response_model=List[CampusResponse])
def get_campuses(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """
    Retrieve a list of campuses.
    """
    return db.query(Campus).order_by(Campus.name).offset(skip).limit(limit).all()


@router.get("/{campus_id}", response_model=CampusResponse)
def get_campus(campus_id: int, db: Session = Depends(get_db)):
    return _get_campus(db, campus_id)


@router.put("/{campus_id}", response_model=CampusResponse)
def update_campus(
    campus_id: int,
    campus_update: CampusUpdate,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_admin),
):
    """
    Update a campus's details.
    Admin only.
    """
    db_campus = _get_campus(db, campus_id)
    update_data = campus_update.model_dump(exclude_unset=True)
    if update_data.get("name"):
        update_data["name"] = update_data["name"].strip()
        _ensure_unique_name(db, update_data["name"], exclude_id=campus_id)

    for key, value in update_data.items():
        setattr(db_campus, key, value)
    db_campus.touch(actor.user_id, system_clock.now())
    db.commit()
    db.refresh(db_campus)
    return db_campus


@router.delete("/{campus_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_campus(
    campus_id: int,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_admin),
):
    """
    Soft delete a campus that no longer has rooms.
    Admin only.
    """
    db_campus = _get_campus(db, campus_id)
    if db.query(Room).filter(Room.campus_id == campus_id).count():
        raise BadRequestError("Cannot delete a campus that still has rooms")

    db_campus.soft_delete(actor.user_id, system_clock.now())
    db.commit()
    logger.info(f"Campus soft deleted: {campus_id}")
    return None
