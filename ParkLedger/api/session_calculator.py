from datetime import datetime, timezone
from decimal import Decimal, ROUND_UP
from hashlib import md5
import uuid

CENT = Decimal("0.01")


def utc_now() -> datetime:
    # stored as naive UTC with second precision, matching the DATETIME columns
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def duration_minutes(started: datetime, stopped: datetime) -> int:
    # whole minutes, fractional minutes are dropped
    seconds = (stopped - started).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


def calculate_cost(tariff: float, minutes: int) -> float:
    """Cost of parking `minutes` at an hourly `tariff`.

    The per-minute rate is tariff / 60; the result is rounded up to whole
    cents so a positive duration at a positive tariff never costs 0.
    """
    if minutes <= 0 or not tariff or tariff <= 0:
        return 0.0
    cost = Decimal(str(tariff)) * Decimal(minutes) / Decimal(60)
    # ROUND_UP, not half-up: a short stay at a positive tariff never comes out at 0.00
    return float(cost.quantize(CENT, rounding=ROUND_UP))


def calculate_price(parkinglot, started: datetime, stopped: datetime):
    minutes = duration_minutes(started, stopped)
    return calculate_cost(parkinglot.tariff, minutes), minutes


def sum_amounts(amounts) -> float:
    total = sum((Decimal(str(a)) for a in amounts), Decimal("0"))
    return float(total.quantize(CENT))


def generate_payment_hash(sid, licenseplate: str):
    # audit marker only
    return md5(f"{sid}{licenseplate}".encode("utf-8")).hexdigest()


def generate_transaction_validation_hash():
    return uuid.uuid4().hex
