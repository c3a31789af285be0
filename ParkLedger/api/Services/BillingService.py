from typing import Optional

from ParkLedger.api.DBConnection import DBConnection
from ParkLedger.api.DataAccess.AccessPayments import AccessPayments
from ParkLedger.api.Models.Billing import Billing


class BillingService:

    def __init__(self, conn: DBConnection):
        self.access_payments = AccessPayments(conn=conn)


    def get_all(self) -> list[Billing]:
        # first-seen order of initiators
        grouped = {}
        for payment in self.access_payments.get_all_payments():
            grouped.setdefault(payment.initiator, []).append(payment)
        return [Billing(user=user, payments=payments) for user, payments in grouped.items()]


    def get_by_user(self, username: str) -> Optional[Billing]:
        """None when the user never paid anything; that is not an error."""
        payments = self.access_payments.get_payments_by_initiator(username)
        if not payments:
            return None
        return Billing(user=username, payments=payments)
