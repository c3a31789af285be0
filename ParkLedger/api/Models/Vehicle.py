from datetime import datetime

class Vehicle:

    def __init__(self,
                  id: int,
                  user_id: int,
                  licenseplate: str,
                  make: str,
                  model: str,
                  color: str,
                  year: int,
                  created_at: datetime):

        self.id = id
        self.user_id = user_id
        self.licenseplate = licenseplate
        self.make = make
        self.model = model
        self.color = color
        self.year = year
        self.created_at = created_at


    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "licenseplate": self.licenseplate,
            "make": self.make,
            "model": self.model,
            "color": self.color,
            "year": self.year,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


    def __repr__(self):
        return f"Vehicle({self.id}, {self.licenseplate})"
