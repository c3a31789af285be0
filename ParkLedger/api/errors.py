class ParkingError(Exception):
    """Base class for business-rule rejections raised by the engine."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ParkingError):
    status_code = 400


class NotFoundError(ParkingError):
    status_code = 404


class AlreadyStoppedError(NotFoundError):
    """No active session with the given id exists: it was already stopped."""

    status_code = 409


class NoUnpaidSessionError(NotFoundError):
    status_code = 404


class NoUnpaidSessionsError(NoUnpaidSessionError):
    status_code = 404


class LotFullError(ParkingError):
    status_code = 409


class ActiveSessionExistsError(ParkingError):
    status_code = 409


class DoubleReleaseError(ParkingError):
    """A capacity hold was released (or moved) after it was already gone."""

    status_code = 409
