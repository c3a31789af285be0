from datetime import datetime

class TransactionData:

    def __init__(self,
                 amount: float,
                 date: datetime,
                 method: str,
                 issuer: str,
                 bank: str):

        self.amount = amount
        self.date = date
        self.method = method
        self.issuer = issuer
        self.bank = bank


    def to_dict(self):
        return {
            "amount": self.amount,
            "date": self.date.isoformat(),
            "method": self.method,
            "issuer": self.issuer,
            "bank": self.bank,
        }
