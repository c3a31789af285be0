"""Reconciles unpaid sessions against new payments.

Payments are an audit trail: they are inserted, never edited, and removing
one does not reopen the sessions it settled.
"""
import logging
from typing import Optional

from ParkLedger.api.DBConnection import DBConnection
from ParkLedger.api.DataAccess.AccessPayments import AccessPayments
from ParkLedger.api.DataAccess.AccessSessions import AccessSessions
from ParkLedger.api.Models.Payment import Payment
from ParkLedger.api.Models.Session import Session, COMPLETED, PAID
from ParkLedger.api.Models.TransactionData import TransactionData
from ParkLedger.api.errors import (
    NoUnpaidSessionError,
    NoUnpaidSessionsError,
    ValidationError,
)
from ParkLedger.api.pagination import DEFAULT_PAGE_SIZE, check_page
from ParkLedger.api import session_calculator as sc

logger = logging.getLogger(__name__)


class PaySingleSessionDTO:

    def __init__(self,
                 session_id: int,
                 licenseplate: str,
                 initiator: str,
                 method: str = "card",
                 bank: str = "internal"):

        self.session_id = session_id
        self.licenseplate = licenseplate
        self.initiator = initiator
        self.method = method
        self.bank = bank


class AggregatePaymentDTO:

    def __init__(self,
                 licenseplate: str,
                 initiator: str,
                 method: str = "card",
                 bank: str = "internal"):

        self.licenseplate = licenseplate
        self.initiator = initiator
        self.method = method
        self.bank = bank


class PaymentService:

    def __init__(self, conn: DBConnection, clock=sc.utc_now):
        self.db = conn
        self.clock = clock
        self.access_payments = AccessPayments(conn=conn)
        self.access_sessions = AccessSessions(conn=conn)


    def _new_payment(self, amount: float, initiator: str, method: str, bank: str,
                     issuer: str, session_ref: str, parking_lot_id=None) -> Payment:
        now = self.clock()
        return Payment(
            id=None,
            transaction=sc.generate_transaction_validation_hash(),
            amount=amount,
            initiator=initiator,
            created_at=now,
            completed=now,
            hash=sc.generate_payment_hash(session_ref, issuer),
            t_data=TransactionData(
                amount=amount,
                date=now,
                method=method or "card",
                issuer=issuer,
                bank=bank or "internal",
            ),
            session_id=session_ref,
            parking_lot_id=parking_lot_id,
        )


    def get_unpaid_sessions(self, licenseplate: str) -> list[Session]:
        return self.access_sessions.get_pending_sessions_bylicenseplate(licenseplate)


    def pay_single_session(self, dto: PaySingleSessionDTO) -> Payment:
        if not dto.initiator:
            raise ValidationError("Initiator is required")

        with self.db.transaction():
            session = self.access_sessions.get_pending_session(dto.session_id, dto.licenseplate)
            if session is None:
                raise NoUnpaidSessionError(
                    f"No unpaid session {dto.session_id} found for {dto.licenseplate}"
                )

            payment = self._new_payment(
                amount=session.cost,
                initiator=dto.initiator,
                method=dto.method,
                bank=dto.bank,
                issuer=session.licenseplate,
                session_ref=str(session.id),
                parking_lot_id=session.parking_lot_id,
            )
            self.access_payments.add_payment(payment)
            if self.access_sessions.set_payment_status([session.id], COMPLETED) != 1:
                raise NoUnpaidSessionError(f"Session {session.id} was settled concurrently")

        logger.info("Session %s paid by %s: %.2f", session.id, dto.initiator, payment.amount,
                    extra={"payment_id": payment.id, "session_id": session.id, "amount": payment.amount})
        return payment


    def create_aggregate_payment(self, dto: AggregatePaymentDTO) -> Payment:
        if not dto.initiator:
            raise ValidationError("Initiator is required")

        with self.db.transaction():
            sessions = self.access_sessions.get_pending_sessions_bylicenseplate(dto.licenseplate)
            if not sessions:
                raise NoUnpaidSessionsError(f"No unpaid parking sessions found for {dto.licenseplate}")

            amount = sc.sum_amounts(s.cost for s in sessions)
            lot_ids = {s.parking_lot_id for s in sessions}
            payment = self._new_payment(
                amount=amount,
                initiator=dto.initiator,
                method=dto.method,
                bank=dto.bank,
                issuer=dto.licenseplate,
                session_ref=dto.licenseplate,
                parking_lot_id=lot_ids.pop() if len(lot_ids) == 1 else None,
            )
            self.access_payments.add_payment(payment)
            updated = self.access_sessions.set_payment_status([s.id for s in sessions], PAID)
            if updated != len(sessions):
                # someone else settled part of the batch; undo everything
                raise NoUnpaidSessionsError(f"Unpaid sessions for {dto.licenseplate} changed during payment")

        logger.info("Settled %s sessions for %s in one payment of %.2f", len(sessions), dto.licenseplate,
                    payment.amount,
                    extra={"payment_id": payment.id, "licenseplate": dto.licenseplate, "amount": payment.amount})
        return payment


    def delete(self, payment_id) -> bool:
        with self.db.transaction():
            payment = self.access_payments.get_payment(id=payment_id)
            if payment is None:
                return False
            self.access_payments.delete_payment(payment)
        logger.info("Deleted payment %s", payment_id, extra={"payment_id": payment_id})
        return True


    def get(self, payment_id) -> Optional[Payment]:
        return self.access_payments.get_payment(id=payment_id)


    def get_all(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE):
        offset = check_page(page, page_size)
        payments = self.access_payments.get_payments(limit=page_size, offset=offset)
        return payments, self.access_payments.count_payments()


    def get_by_initiator(self, initiator: str) -> list[Payment]:
        return self.access_payments.get_payments_by_initiator(initiator)
