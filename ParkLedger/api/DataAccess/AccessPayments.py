from ParkLedger.api.DBConnection import DBConnection, from_db_datetime, to_db_datetime
from ParkLedger.api.Models.Payment import Payment
from ParkLedger.api.Models.TransactionData import TransactionData

class AccessPayments:

    def __init__(self, conn: DBConnection):
        self.db = conn


    _select = """
        SELECT p.*,
               t.amount AS t_amount,
               t.date AS t_date,
               t.method AS t_method,
               t.issuer AS t_issuer,
               t.bank AS t_bank
        FROM payments p
        JOIN t_data t ON t.id = p.id
    """


    def _to_payment(self, row):
        row_dict = dict(row)
        t_data = TransactionData(
            amount=float(row_dict["t_amount"]),
            date=from_db_datetime(row_dict["t_date"]),
            method=row_dict["t_method"],
            issuer=row_dict["t_issuer"],
            bank=row_dict["t_bank"],
        )
        return Payment(
            id=row_dict["id"],
            transaction=row_dict["transaction_ref"],
            amount=float(row_dict["amount"]),
            initiator=row_dict["initiator"],
            created_at=from_db_datetime(row_dict["created_at"]),
            completed=from_db_datetime(row_dict["completed"]),
            hash=row_dict["hash"],
            t_data=t_data,
            session_id=row_dict.get("session_id"),
            parking_lot_id=row_dict.get("parking_lot_id"),
        )


    def get_payment(self, id):
        query = self._select + "WHERE p.id = ?;"
        row = self.db.fetchone(query, [id])
        if row is None:
            return None
        return self._to_payment(row)


    def get_all_payments(self) -> list[Payment]:
        query = self._select + "ORDER BY p.created_at, p.id;"
        return [self._to_payment(row) for row in self.db.fetchall(query)]


    def get_payments(self, limit: int, offset: int = 0) -> list[Payment]:
        query = self._select + "ORDER BY p.created_at DESC, p.id DESC LIMIT ? OFFSET ?;"
        return [self._to_payment(row) for row in self.db.fetchall(query, [limit, offset])]


    def count_payments(self) -> int:
        row = self.db.fetchone("SELECT COUNT(*) AS total FROM payments;")
        return row["total"]


    def get_payments_by_initiator(self, initiator: str) -> list[Payment]:
        query = self._select + "WHERE p.initiator = ? ORDER BY p.created_at, p.id;"
        return [self._to_payment(row) for row in self.db.fetchall(query, [initiator])]


    def add_payment(self, payment: Payment):
        query = """
        INSERT INTO payments
            (transaction_ref, amount, initiator, created_at, completed, hash, session_id, parking_lot_id)
        VALUES
            (:transaction_ref, :amount, :initiator, :created_at, :completed, :hash, :session_id, :parking_lot_id);
        """
        tdata_query = """
        INSERT INTO t_data
            (id, amount, date, method, issuer, bank)
        VALUES
            (:id, :amount, :date, :method, :issuer, :bank);
        """
        payment_dict = {
            "transaction_ref": payment.transaction,
            "amount": payment.amount,
            "initiator": payment.initiator,
            "created_at": to_db_datetime(payment.created_at),
            "completed": to_db_datetime(payment.completed),
            "hash": payment.hash,
            "session_id": payment.session_id,
            "parking_lot_id": payment.parking_lot_id,
        }
        with self.db.transaction():
            cursor = self.db.execute(query, payment_dict)
            payment.id = cursor.lastrowid
            tdata_dict = {
                "id": payment.id,
                "amount": payment.t_data.amount,
                "date": to_db_datetime(payment.t_data.date),
                "method": payment.t_data.method,
                "issuer": payment.t_data.issuer,
                "bank": payment.t_data.bank,
            }
            self.db.execute(tdata_query, tdata_dict)
        return payment


    def delete_payment(self, payment: Payment):
        query = """
        DELETE FROM payments
        WHERE id = ?;
        """
        tdata_query = """
        DELETE FROM t_data
        WHERE id = ?;
        """
        with self.db.transaction():
            self.db.execute(tdata_query, [payment.id])
            self.db.execute(query, [payment.id])
