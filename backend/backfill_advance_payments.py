#!/usr/bin/env python3
"""
Script to record the missing Advance payment of truck hiring notes created
before advances were stored as payments, then refresh their paid/balance/status.
"""

from decimal import Decimal
import logging

from sqlalchemy.orm import Session
from database import SessionLocal
import models  # noqa: F401
from models.truck_hiring_notes import TruckHiringNote
from crud.reconciliation import advance_payment_exists, recompute_thn_status
from crud.truck_hiring_notes import create_advance_payment

logger = logging.getLogger("backfill_advance_payments")


def backfill_advance_payments(db: Session) -> int:
    """Create the Advance payment for every note that has an advance but no payment record."""
    notes = db.query(TruckHiringNote).filter(TruckHiringNote.advance_amount > 0).order_by(TruckHiringNote.thn_number).all()

    created_count = 0
    for thn in notes:
        if advance_payment_exists(db, thn):
            continue
        create_advance_payment(db, thn, Decimal(thn.advance_amount), user_id="backfill")
        recompute_thn_status(db, thn.id)
        created_count += 1
        print(f"THN {thn.thn_number}: recorded advance payment of {thn.advance_amount}")

    return created_count


def main():
    db: Session = SessionLocal()
    try:
        created_count = backfill_advance_payments(db)
        print(f"\nSuccessfully backfilled {created_count} advance payments.")
    except Exception as e:
        db.rollback()
        logger.exception("Backfill failed")
        print(f"Error: {e}")
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    main()
