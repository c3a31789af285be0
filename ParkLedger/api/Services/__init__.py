from .CapacityTracker import CapacityTracker
from .SessionService import SessionService
from .ReservationService import ReservationService, ReservationDTO
from .PaymentService import PaymentService, PaySingleSessionDTO, AggregatePaymentDTO
from .BillingService import BillingService
from .ParkingLotService import ParkingLotService
