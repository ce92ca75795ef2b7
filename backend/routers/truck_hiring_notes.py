from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging
from utils.auth_utils import get_current_user, get_user_identifier

from database import get_db
from crud import truck_hiring_notes as crud_thn
from schemas.truck_hiring_notes import TruckHiringNote, TruckHiringNoteCreate, TruckHiringNoteUpdate

router = APIRouter(prefix="/truck-hiring-notes", tags=["Truck Hiring Notes"])
logger = logging.getLogger("truck_hiring_notes")

@router.post("/", response_model=TruckHiringNote, status_code=status.HTTP_201_CREATED)
def create_truck_hiring_note(
    note: TruckHiringNoteCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    """Create a truck hiring note. A non-zero advance is also recorded as an Advance payment."""
    return crud_thn.create_thn(db, note, get_user_identifier(user))

@router.get("/", response_model=List[TruckHiringNote])
def read_truck_hiring_notes(db: Session = Depends(get_db)):
    return crud_thn.list_thns(db)

@router.get("/{thn_id}", response_model=TruckHiringNote)
def read_truck_hiring_note(thn_id: int, db: Session = Depends(get_db)):
    return crud_thn.read_thn(db, thn_id)

@router.patch("/{thn_id}", response_model=TruckHiringNote)
def update_truck_hiring_note(
    thn_id: int,
    note: TruckHiringNoteUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    return crud_thn.update_thn(db, thn_id, note, get_user_identifier(user))

@router.delete("/{thn_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_truck_hiring_note(
    thn_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    crud_thn.delete_thn(db, thn_id, get_user_identifier(user))
    return None

@router.post("/{thn_id}/recalculate", response_model=TruckHiringNote)
def recalculate_truck_hiring_note(
    thn_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    logger.info(f"THN ID {thn_id} recalculation requested by user {get_user_identifier(user)}")
    return crud_thn.read_thn(db, thn_id)
