from datetime import datetime
from typing import Optional
from .TransactionData import TransactionData

class Payment:

    def __init__(self,
                 id: int,
                 transaction: str,
                 amount: float,
                 initiator: str,
                 created_at: datetime,
                 completed: datetime,
                 hash: str,
                 t_data: TransactionData,
                 session_id: Optional[str] = None,
                 parking_lot_id: Optional[int] = None):

        self.id = id
        self.transaction = transaction
        self.amount = amount
        self.initiator = initiator
        self.created_at = created_at
        self.completed = completed
        self.hash = hash
        self.t_data = t_data
        self.session_id = session_id
        self.parking_lot_id = parking_lot_id


    def to_dict(self):
        return {
            "id": self.id,
            "transaction": self.transaction,
            "amount": self.amount,
            "initiator": self.initiator,
            "created_at": self.created_at.isoformat(),
            "completed": self.completed.isoformat(),
            "hash": self.hash,
            "t_data": self.t_data.to_dict(),
            "session_id": self.session_id,
            "parking_lot_id": self.parking_lot_id,
        }


    def __repr__(self):
        return f"Payment({self.transaction}, {self.amount})"
