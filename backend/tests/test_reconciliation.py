from datetime import date
from decimal import Decimal
import logging

from crud import payments as crud_payments
from crud import truck_hiring_notes as crud_thn
from crud.reconciliation import derive_status, effective_paid_amount, recompute_thn_status, settle
from models.invoices import InvoiceStatus
from models.payments import Payment, PaymentMode, PaymentType
from models.truck_hiring_notes import THNStatus, TruckHiringNote
from schemas.payments import PaymentCreate, PaymentUpdate
from schemas.truck_hiring_notes import TruckHiringNoteCreate
from tests.factories import thn_payload


def create_thn(db, **overrides):
    return crud_thn.create_thn(db, TruckHiringNoteCreate(**thn_payload(**overrides)), "tester")


def pay_thn(db, thn_id, amount, payment_type=PaymentType.RECEIPT):
    payment = PaymentCreate(
        truck_hiring_note_id=thn_id,
        date=date(2025, 1, 20),
        amount=Decimal(amount),
        type=payment_type,
        mode=PaymentMode.NEFT,
    )
    return crud_payments.create_payment(db, payment, "tester")


def snapshot(db, thn_id):
    db.expire_all()
    thn = db.query(TruckHiringNote).filter(TruckHiringNote.id == thn_id).one()
    return thn.paid_amount, thn.balance_amount, thn.status


def test_derive_status():
    assert derive_status(Decimal("0"), Decimal("100"), THNStatus) == THNStatus.PAID
    assert derive_status(Decimal("50"), Decimal("100"), InvoiceStatus) == InvoiceStatus.PARTIALLY_PAID
    assert derive_status(Decimal("50"), Decimal("0"), InvoiceStatus) == InvoiceStatus.UNPAID


def test_settle_clamps_overpayment():
    settlement = settle(Decimal("1000"), Decimal("1500"), THNStatus)
    assert settlement.balance_amount == Decimal("0")
    assert settlement.paid_amount == Decimal("1500")
    assert settlement.status == THNStatus.PAID


def test_thn_with_advance_then_full_payment(db_session):
    thn = create_thn(db_session)

    assert thn.status == THNStatus.PARTIALLY_PAID
    assert thn.paid_amount == Decimal("2000")
    assert thn.balance_amount == Decimal("6500")

    pay_thn(db_session, thn.id, "6500")

    assert snapshot(db_session, thn.id) == (Decimal("8500"), Decimal("0"), THNStatus.PAID)


def test_advance_is_recorded_once_and_not_double_counted(db_session):
    thn = create_thn(db_session, advance_amount="5000", additional_charges="0")

    advances = db_session.query(Payment).filter(
        Payment.truck_hiring_note_id == thn.id, Payment.type == PaymentType.ADVANCE
    ).all()
    assert len(advances) == 1
    assert advances[0].amount == Decimal("5000")
    assert advances[0].reference_no == f"THN-{thn.thn_number}-ADVANCE"
    assert advances[0].mode == PaymentMode.UPI
    assert effective_paid_amount(db_session, thn) == Decimal("5000")
    assert thn.paid_amount == Decimal("5000")


def test_thn_without_advance_starts_unpaid(db_session):
    thn = create_thn(db_session, advance_amount="0")
    assert thn.status == THNStatus.UNPAID
    assert thn.balance_amount == Decimal("8500")
    assert thn.payments == []


def test_legacy_thn_counts_advance_amount(db_session):
    thn = TruckHiringNote(**TruckHiringNoteCreate(**thn_payload()).model_dump(), thn_number=900)
    db_session.add(thn)
    db_session.commit()

    recompute_thn_status(db_session, thn.id)

    assert snapshot(db_session, thn.id) == (Decimal("2000"), Decimal("6500"), THNStatus.PARTIALLY_PAID)


def test_untagged_advance_does_not_replace_legacy_advance(db_session):
    thn = TruckHiringNote(**TruckHiringNoteCreate(**thn_payload()).model_dump(), thn_number=901)
    db_session.add(thn)
    db_session.commit()
    pay_thn(db_session, thn.id, "1000", payment_type=PaymentType.ADVANCE)

    # The manual advance lacks the THN-901-ADVANCE tag, so advance_amount still counts
    assert snapshot(db_session, thn.id)[0] == Decimal("3000")


def test_recompute_is_idempotent(db_session):
    thn = create_thn(db_session)
    pay_thn(db_session, thn.id, "1000")

    recompute_thn_status(db_session, thn.id)
    first = snapshot(db_session, thn.id)
    recompute_thn_status(db_session, thn.id)
    assert snapshot(db_session, thn.id) == first == (Decimal("3000"), Decimal("5500"), THNStatus.PARTIALLY_PAID)


def test_overpayment_clamps_balance(db_session):
    thn = create_thn(db_session)
    pay_thn(db_session, thn.id, "9000")
    paid, balance, status = snapshot(db_session, thn.id)
    assert paid == Decimal("11000")
    assert balance == Decimal("0")
    assert status == THNStatus.PAID


def test_deleting_payment_reopens_thn(db_session):
    thn = create_thn(db_session)
    payment = pay_thn(db_session, thn.id, "6500")
    assert snapshot(db_session, thn.id)[2] == THNStatus.PAID

    crud_payments.delete_payment(db_session, payment.id, "tester")

    assert snapshot(db_session, thn.id) == (Decimal("2000"), Decimal("6500"), THNStatus.PARTIALLY_PAID)


def test_editing_payment_down_reopens_thn(db_session):
    thn = create_thn(db_session)
    payment = pay_thn(db_session, thn.id, "6500")

    crud_payments.update_payment(db_session, payment.id, PaymentUpdate(amount=Decimal("500")), "tester")

    assert snapshot(db_session, thn.id) == (Decimal("2500"), Decimal("6000"), THNStatus.PARTIALLY_PAID)


def test_recompute_missing_thn_is_logged_not_raised(db_session, caplog):
    with caplog.at_level(logging.WARNING, logger="crud.reconciliation"):
        recompute_thn_status(db_session, 4242)
    assert "4242" in caplog.text


def test_list_recomputes_every_thn(db_session):
    first = create_thn(db_session)
    second = create_thn(db_session, advance_amount="0")
    # Simulate stale stored figures
    db_session.query(TruckHiringNote).update(
        {TruckHiringNote.status: THNStatus.PAID, TruckHiringNote.balance_amount: Decimal("0")},
        synchronize_session=False,
    )
    db_session.commit()

    notes = crud_thn.list_thns(db_session)

    assert [n.id for n in notes] == [second.id, first.id]
    assert {n.id: n.status for n in notes} == {first.id: THNStatus.PARTIALLY_PAID, second.id: THNStatus.UNPAID}
