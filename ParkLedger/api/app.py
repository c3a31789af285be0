# Standaard imports
import logging
import os
from datetime import datetime, timezone
from typing import Optional

# 3rd party
import uvicorn
from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Locale imports
from ParkLedger.api.authentication import get_current_user, require_roles, require_self_or_admin
from ParkLedger.api.DBConnection import DBConnection
from ParkLedger.api.DataAccess.AccessVehicles import AccessVehicles
from ParkLedger.api.DataAccess.Logger import log_access, setup_logger
from ParkLedger.api.Models.Vehicle import Vehicle
from ParkLedger.api.Services import (
    AggregatePaymentDTO,
    BillingService,
    CapacityTracker,
    ParkingLotService,
    PaySingleSessionDTO,
    PaymentService,
    ReservationDTO,
    ReservationService,
    SessionService,
)
from ParkLedger.api.errors import NotFoundError, ParkingError
from ParkLedger.api.models import (
    ParkingLotCreate,
    ParkingLotUpdate,
    PayAggregate,
    PaySingleSession,
    ReservationBody,
    SessionStart,
    VehicleCreate,
)
from ParkLedger.api.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, page_response
from ParkLedger.api.session_calculator import utc_now
from ParkLedger.api.session_manager import Principal, TokenStore, load_tokens
from ParkLedger.middleware.performance_tracer import PerformanceTracer

logger = logging.getLogger(__name__)

DATA_DIR = (
    os.environ.get("PARKLEDGER_DB_DIR")
    or os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "..", "ParkLedger-data")
)

_CORS_ORIGINS = [o.strip() for o in os.environ.get("PARKLEDGER_CORS_ORIGINS", "").split(",") if o.strip()]


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0)


def _reservation_dto(body: ReservationBody) -> ReservationDTO:
    return ReservationDTO(
        user_id=body.user_id,
        parking_lot_id=body.parking_lot_id,
        vehicle_id=body.vehicle_id,
        start_time=_naive_utc(body.start_time),
        end_time=_naive_utc(body.end_time),
        status=body.status,
        cost=body.cost,
    )


def create_app(connection: Optional[DBConnection] = None,
               token_store: Optional[TokenStore] = None,
               clock=utc_now) -> FastAPI:
    if connection is None:
        os.makedirs(DATA_DIR, exist_ok=True)
        connection = DBConnection(database_path=os.path.join(DATA_DIR, "ParkLedger.db"))

    tracker = CapacityTracker(connection, clock=clock)
    lots = ParkingLotService(connection, clock=clock)
    sessions = SessionService(connection, tracker=tracker, clock=clock)
    vehicles = AccessVehicles(conn=connection)
    reservations = ReservationService(connection, tracker=tracker, session_service=sessions,
                                      vehicles=vehicles, clock=clock)
    payments = PaymentService(connection, clock=clock)
    billing = BillingService(connection)

    app = FastAPI(title="ParkLedger API", version="1.0.0")
    app.state.connection = connection
    app.state.token_store = token_store or TokenStore()

    app.add_middleware(PerformanceTracer)
    if _CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=_CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(ParkingError)
    async def parking_error_handler(request: Request, exc: ParkingError):
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message,
                       extra={"endpoint": request.url.path})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "type": type(exc).__name__},
        )

    @app.get("/")
    async def root():
        return {"message": "ParkLedger API is running"}

    # parking lots

    @app.get("/parking-lots")
    async def list_parking_lots(page: int = Query(1, ge=1),
                                page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)):
        items, total = lots.get_all(page=page, page_size=page_size)
        return page_response(items, page, page_size, total)

    @app.get("/parking-lots/{lid}")
    async def get_parking_lot(lid: int):
        return lots.get(lid).to_dict()

    @app.post("/parking-lots", status_code=status.HTTP_201_CREATED)
    async def create_parking_lot(body: ParkingLotCreate, user: Principal = Depends(require_roles("ADMIN"))):
        parking_lot = lots.create(
            name=body.name,
            location=body.location,
            address=body.address,
            capacity=body.capacity,
            tariff=body.tariff,
            daytariff=body.daytariff,
            coordinates=body.coordinates,
        )
        return parking_lot.to_dict()

    @app.put("/parking-lots/{lid}")
    async def update_parking_lot(lid: int, body: ParkingLotUpdate,
                                 user: Principal = Depends(require_roles("ADMIN"))):
        return lots.update(lid, **body.model_dump(exclude_unset=True)).to_dict()

    @app.delete("/parking-lots/{lid}")
    async def delete_parking_lot(lid: int, user: Principal = Depends(require_roles("ADMIN"))):
        lots.delete(lid)
        return {"message": f"Parking lot {lid} deleted"}

    # vehicle registry

    @app.post("/vehicles", status_code=status.HTTP_201_CREATED)
    async def create_vehicle(body: VehicleCreate, user: Principal = Depends(get_current_user)):
        vehicle = Vehicle(
            id=None,
            user_id=body.user_id,
            licenseplate=body.licenseplate,
            make=body.make,
            model=body.model,
            color=body.color,
            year=body.year,
            created_at=clock(),
        )
        return vehicles.add_vehicle(vehicle).to_dict()

    # sessions

    @app.post("/parking-lots/{lid}/sessions/start", status_code=status.HTTP_201_CREATED)
    async def start_session(lid: int, body: SessionStart, user: Principal = Depends(get_current_user)):
        return sessions.start_session(lid, body.licenseplate, user.username).to_dict()

    @app.post("/sessions/{sid}/stop")
    async def stop_session(sid: int, user: Principal = Depends(get_current_user)):
        session = sessions.get_session(sid)
        require_self_or_admin(user, session.username)
        return sessions.stop_session(sid).to_dict()

    @app.get("/sessions/active")
    async def list_active_sessions(user: Principal = Depends(require_roles("ADMIN"))):
        return [s.to_dict() for s in sessions.get_active_sessions()]

    @app.get("/sessions/user/{username}")
    async def list_user_sessions(username: str, user: Principal = Depends(get_current_user)):
        require_self_or_admin(user, username)
        return [s.to_dict() for s in sessions.get_sessions_by_user(username)]

    @app.get("/sessions/{sid}")
    async def get_session(sid: int, user: Principal = Depends(get_current_user)):
        session = sessions.get_session(sid)
        require_self_or_admin(user, session.username)
        return session.to_dict()

    # reservations

    @app.get("/reservations")
    async def list_reservations(page: int = Query(1, ge=1),
                                page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
                                user: Principal = Depends(require_roles("ADMIN"))):
        items, total = reservations.get_all(page=page, page_size=page_size)
        return page_response(items, page, page_size, total)

    @app.get("/reservations/user/{user_id}")
    async def list_user_reservations(user_id: int, user: Principal = Depends(get_current_user)):
        return [r.to_dict() for r in reservations.get_by_user(user_id)]

    @app.get("/reservations/{rid}")
    async def get_reservation(rid: int, user: Principal = Depends(get_current_user)):
        return reservations.get(rid).to_dict()

    @app.post("/reservations", status_code=status.HTTP_201_CREATED)
    async def create_reservation(body: ReservationBody, user: Principal = Depends(get_current_user)):
        return reservations.create(_reservation_dto(body)).to_dict()

    @app.put("/reservations/{rid}")
    async def update_reservation(rid: int, body: ReservationBody, user: Principal = Depends(get_current_user)):
        return reservations.update(rid, _reservation_dto(body)).to_dict()

    @app.delete("/reservations/{rid}")
    async def delete_reservation(rid: int, user: Principal = Depends(get_current_user)):
        reservations.delete(rid)
        return {"message": f"Reservation {rid} deleted"}

    # payments

    @app.get("/payments/unpaid/{licenseplate}")
    async def list_unpaid_sessions(licenseplate: str, user: Principal = Depends(get_current_user)):
        return [s.to_dict() for s in payments.get_unpaid_sessions(licenseplate)]

    @app.post("/payments/session", status_code=status.HTTP_201_CREATED)
    async def pay_single_session(body: PaySingleSession, user: Principal = Depends(get_current_user)):
        dto = PaySingleSessionDTO(
            session_id=body.session_id,
            licenseplate=body.licenseplate,
            initiator=user.username,
            method=body.method,
            bank=body.bank,
        )
        return payments.pay_single_session(dto).to_dict()

    @app.post("/payments", status_code=status.HTTP_201_CREATED)
    async def create_aggregate_payment(body: PayAggregate, user: Principal = Depends(get_current_user)):
        dto = AggregatePaymentDTO(
            licenseplate=body.licenseplate,
            initiator=user.username,
            method=body.method,
            bank=body.bank,
        )
        return payments.create_aggregate_payment(dto).to_dict()

    @app.get("/payments")
    async def list_payments(page: int = Query(1, ge=1),
                            page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
                            user: Principal = Depends(require_roles("ADMIN"))):
        items, total = payments.get_all(page=page, page_size=page_size)
        return page_response(items, page, page_size, total)

    @app.get("/payments/initiator/{initiator}")
    async def list_payments_by_initiator(initiator: str, user: Principal = Depends(get_current_user)):
        require_self_or_admin(user, initiator)
        return [p.to_dict() for p in payments.get_by_initiator(initiator)]

    @app.get("/payments/{pid}")
    async def get_payment(pid: int, user: Principal = Depends(get_current_user)):
        payment = payments.get(pid)
        if payment is None:
            raise NotFoundError(f"Payment {pid} not found")
        require_self_or_admin(user, payment.initiator)
        return payment.to_dict()

    @app.delete("/payments/{pid}")
    async def delete_payment(pid: int, user: Principal = Depends(require_roles("ADMIN"))):
        if not payments.delete(pid):
            raise NotFoundError(f"Payment {pid} not found")
        return {"message": f"Payment {pid} deleted"}

    # billing

    @app.get("/billing")
    async def get_billing(user: Principal = Depends(require_roles("ADMIN"))):
        log_access(user.username, user.role, "/billing")
        return [b.to_dict() for b in billing.get_all()]

    @app.get("/billing/{username}")
    async def get_user_billing(username: str, user: Principal = Depends(get_current_user)):
        require_self_or_admin(user, username)
        log_access(user.username, user.role, "/billing/{username}")
        result = billing.get_by_user(username)
        if result is None:
            return JSONResponse(status_code=status.HTTP_404_NOT_FOUND,
                                content={"error": f"No billing found for {username}"})
        return result.to_dict()

    return app


def main():
    setup_logger()
    token_store = load_tokens(os.environ.get("PARKLEDGER_TOKENS", ""))
    uvicorn.run(
        create_app(token_store=token_store),
        host=os.environ.get("PARKLEDGER_HOST", "127.0.0.1"),
        port=int(os.environ.get("PARKLEDGER_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
