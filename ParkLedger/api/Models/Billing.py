from decimal import Decimal
from typing import List
from .Payment import Payment

class Billing:
    """Read-only rollup of one user's payments.

    The total is derived from the payments every time it is read.
    """

    def __init__(self, user: str, payments: List[Payment]):
        self.user = user
        self.payments = list(payments)


    @property
    def total_amount(self) -> float:
        total = sum((Decimal(str(p.amount)) for p in self.payments), Decimal("0"))
        return float(total.quantize(Decimal("0.01")))


    def to_dict(self):
        return {
            "user": self.user,
            "payments": [p.to_dict() for p in self.payments],
            "total_amount": self.total_amount,
        }
