import pytest

from ParkLedger.api.Models.Session import COMPLETED, PAID, PENDING, Session
from ParkLedger.api.DataAccess.AccessSessions import AccessSessions
from ParkLedger.api.Services import (
    AggregatePaymentDTO,
    PaySingleSessionDTO,
    PaymentService,
    SessionService,
)
from ParkLedger.api.errors import NoUnpaidSessionError, NoUnpaidSessionsError, NotFoundError


def _stopped_session(conn, clock, lot, licenseplate, cost, username="user1"):
    session = Session(
        id=None,
        parking_lot_id=lot.id,
        licenseplate=licenseplate,
        username=username,
        started=clock.now,
        stopped=clock.advance(hours=1),
        duration_minutes=60,
        cost=cost,
        payment_status=PENDING,
    )
    return AccessSessions(conn=conn).add_session(session)


def test_aggregate_payment_settles_all_pending(conn, clock, make_lot):
    lot = make_lot()
    first = _stopped_session(conn, clock, lot, "AGG-01", 10.50)
    second = _stopped_session(conn, clock, lot, "AGG-01", 15.75)
    service = PaymentService(conn, clock=clock)

    payment = service.create_aggregate_payment(
        AggregatePaymentDTO(licenseplate="AGG-01", initiator="user1", method="ideal", bank="ING")
    )

    assert payment.amount == 26.25
    assert payment.session_id == "AGG-01"
    assert payment.parking_lot_id == lot.id
    assert payment.t_data.method == "ideal"
    assert payment.t_data.bank == "ING"
    assert service.get_unpaid_sessions("AGG-01") == []

    access_sessions = AccessSessions(conn=conn)
    assert access_sessions.get_session(first.id).payment_status == PAID
    assert access_sessions.get_session(second.id).payment_status == PAID

    stored = service.get(payment.id)
    assert stored.amount == 26.25
    assert stored.transaction == payment.transaction


def test_aggregate_without_pending_sessions(conn, clock):
    service = PaymentService(conn, clock=clock)
    with pytest.raises(NoUnpaidSessionsError):
        service.create_aggregate_payment(AggregatePaymentDTO(licenseplate="NONE-01", initiator="user1"))
    assert service.get_all()[1] == 0


def test_aggregate_skips_active_sessions(conn, clock, make_lot):
    lot = make_lot()
    sessions = SessionService(conn, clock=clock)
    sessions.start_session(lot.id, "ACT-01", "user1")
    service = PaymentService(conn, clock=clock)

    assert service.get_unpaid_sessions("ACT-01") == []
    with pytest.raises(NoUnpaidSessionsError):
        service.create_aggregate_payment(AggregatePaymentDTO(licenseplate="ACT-01", initiator="user1"))


def test_pay_single_session(conn, clock, make_lot):
    lot = make_lot()
    paid = _stopped_session(conn, clock, lot, "ONE-01", 4.20)
    left = _stopped_session(conn, clock, lot, "ONE-01", 3.00)
    service = PaymentService(conn, clock=clock)

    payment = service.pay_single_session(
        PaySingleSessionDTO(session_id=paid.id, licenseplate="ONE-01", initiator="user1")
    )

    assert payment.amount == 4.20
    assert payment.session_id == str(paid.id)
    assert [s.id for s in service.get_unpaid_sessions("ONE-01")] == [left.id]
    assert AccessSessions(conn=conn).get_session(paid.id).payment_status == COMPLETED

    with pytest.raises(NoUnpaidSessionError):
        service.pay_single_session(
            PaySingleSessionDTO(session_id=paid.id, licenseplate="ONE-01", initiator="user1")
        )


def test_pay_single_missing_session_changes_nothing(conn, clock, make_lot):
    lot = make_lot()
    pending = _stopped_session(conn, clock, lot, "MISS-01", 5.00)
    service = PaymentService(conn, clock=clock)

    with pytest.raises(NotFoundError):
        service.pay_single_session(
            PaySingleSessionDTO(session_id=pending.id + 100, licenseplate="MISS-01", initiator="user1")
        )
    with pytest.raises(NoUnpaidSessionError):
        # right id, wrong plate
        service.pay_single_session(
            PaySingleSessionDTO(session_id=pending.id, licenseplate="OTHER-01", initiator="user1")
        )

    assert [s.id for s in service.get_unpaid_sessions("MISS-01")] == [pending.id]
    assert service.get_all()[1] == 0


def test_delete_payment_keeps_sessions_paid(conn, clock, make_lot):
    lot = make_lot()
    session = _stopped_session(conn, clock, lot, "DEL-01", 2.00)
    service = PaymentService(conn, clock=clock)
    payment = service.create_aggregate_payment(AggregatePaymentDTO(licenseplate="DEL-01", initiator="user1"))

    assert service.delete(payment.id) is True
    assert service.get(payment.id) is None
    assert service.delete(payment.id) is False
    assert AccessSessions(conn=conn).get_session(session.id).payment_status == PAID


def _settle_first_during_update(service):
    # another writer marks the first session paid just before the batch update lands
    original = service.access_sessions.set_payment_status

    def racing(ids, payment_status, expected_status=PENDING):
        ids = list(ids)
        original(ids[:1], COMPLETED)
        return original(ids, payment_status, expected_status)

    service.access_sessions.set_payment_status = racing


def test_aggregate_rolls_back_when_a_session_is_settled_meanwhile(conn, clock, make_lot):
    lot = make_lot()
    first = _stopped_session(conn, clock, lot, "RACE-01", 10.50)
    second = _stopped_session(conn, clock, lot, "RACE-01", 15.75)
    service = PaymentService(conn, clock=clock)
    _settle_first_during_update(service)

    with pytest.raises(NoUnpaidSessionsError):
        service.create_aggregate_payment(AggregatePaymentDTO(licenseplate="RACE-01", initiator="user1"))

    assert service.access_payments.count_payments() == 0
    access_sessions = AccessSessions(conn=conn)
    assert access_sessions.get_session(first.id).payment_status == PENDING
    assert access_sessions.get_session(second.id).payment_status == PENDING


def test_single_payment_rolls_back_when_settled_meanwhile(conn, clock, make_lot):
    lot = make_lot()
    session = _stopped_session(conn, clock, lot, "RACE-02", 4.00)
    service = PaymentService(conn, clock=clock)
    _settle_first_during_update(service)

    with pytest.raises(NoUnpaidSessionError):
        service.pay_single_session(
            PaySingleSessionDTO(session_id=session.id, licenseplate="RACE-02", initiator="user1")
        )

    assert service.access_payments.count_payments() == 0
    assert AccessSessions(conn=conn).get_session(session.id).payment_status == PENDING
