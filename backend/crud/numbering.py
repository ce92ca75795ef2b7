from sqlalchemy.orm import Session
from models.numbering import NumberingConfig
import logging

logger = logging.getLogger(__name__)

INVOICE_SEQUENCE = "invoiceId"
PAYMENT_SEQUENCE = "paymentId"
THN_SEQUENCE = "truckHiringNoteId"
LORRY_RECEIPT_SEQUENCE = "lorryReceiptId"


def next_number(db: Session, sequence_type: str) -> int:
    """
    Returns the next document number for `sequence_type` and advances the counter.

    The counter row is locked (SELECT ... FOR UPDATE) so concurrent requests never
    receive the same number. A missing counter is seeded at 1 with a warning; the
    caller's commit persists the increment together with the document.
    """
    config = db.query(NumberingConfig).filter(NumberingConfig.type == sequence_type).with_for_update().first()
    if config is None:
        logger.warning(f"No numbering config for '{sequence_type}'. Seeding counter at 1.")
        config = NumberingConfig(type=sequence_type, current_number=1)
        db.add(config)
        db.flush()

    number = config.current_number
    config.current_number = number + 1
    db.flush()
    return number


def set_next_number(db: Session, sequence_type: str, current_number: int) -> NumberingConfig:
    """Create or reset a counter so the next issued number is `current_number`."""
    config = db.query(NumberingConfig).filter(NumberingConfig.type == sequence_type).first()
    if config is None:
        config = NumberingConfig(type=sequence_type, current_number=current_number)
        db.add(config)
    else:
        config.current_number = current_number
    db.commit()
    db.refresh(config)
    logger.info(f"Numbering '{sequence_type}' set to start at {current_number}")
    return config
