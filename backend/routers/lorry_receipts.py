from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from utils.auth_utils import get_current_user, get_user_identifier

from database import get_db
from crud import numbering as crud_numbering
from models.customers import Customer as CustomerModel
from models.lorry_receipts import LorryReceipt as LorryReceiptModel, LorryReceiptStatus
from schemas.lorry_receipts import LorryReceipt, LorryReceiptCreate

router = APIRouter(prefix="/lorry-receipts", tags=["Lorry Receipts"])
logger = logging.getLogger("lorry_receipts")

@router.post("/", response_model=LorryReceipt, status_code=status.HTTP_201_CREATED)
def create_lorry_receipt(
    lorry_receipt: LorryReceiptCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    party_ids = {lorry_receipt.consignor_id, lorry_receipt.consignee_id}
    found = {row.id for row in db.query(CustomerModel.id).filter(CustomerModel.id.in_(party_ids)).all()}
    if found != party_ids:
        raise HTTPException(status_code=404, detail="Consignor or consignee not found")

    lr_data = lorry_receipt.model_dump()
    # Packages are stored as JSON, so Decimals must be serialised first
    lr_data["packages"] = [package.model_dump(mode="json") for package in lorry_receipt.packages]

    db_lr = LorryReceiptModel(
        **lr_data,
        lr_number=crud_numbering.next_number(db, crud_numbering.LORRY_RECEIPT_SEQUENCE),
        status=LorryReceiptStatus.CREATED,
        created_by=get_user_identifier(user),
    )
    db.add(db_lr)
    db.commit()
    db.refresh(db_lr)
    logger.info(f"LR {db_lr.lr_number} created by user {get_user_identifier(user)}")
    return db_lr

@router.get("/", response_model=List[LorryReceipt])
def read_lorry_receipts(
    status: Optional[LorryReceiptStatus] = None,
    unbilled_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    query = db.query(LorryReceiptModel)
    if status:
        query = query.filter(LorryReceiptModel.status == status)
    if unbilled_only:
        query = query.filter(LorryReceiptModel.invoice_id.is_(None))
    return query.order_by(LorryReceiptModel.lr_number.desc()).offset(skip).limit(limit).all()

@router.get("/{lr_id}", response_model=LorryReceipt)
def read_lorry_receipt(lr_id: int, db: Session = Depends(get_db)):
    db_lr = db.query(LorryReceiptModel).filter(LorryReceiptModel.id == lr_id).first()
    if db_lr is None:
        raise HTTPException(status_code=404, detail="Lorry receipt not found")
    return db_lr
