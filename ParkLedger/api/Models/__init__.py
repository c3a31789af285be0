from .ParkingLot import ParkingLot
from .ParkingLotCoordinates import ParkingLotCoordinates
from .Payment import Payment
from .Reservation import Reservation
from .Session import Session
from .TransactionData import TransactionData
from .Vehicle import Vehicle
from .Billing import Billing
