class ParkingLotCoordinates:

    def __init__(self,
                 lat: float = 0.0,
                 lng: float = 0.0):

        self.lat = lat
        self.lng = lng


    def to_list(self):
        return [self.lat, self.lng]


    def __repr__(self):
        return f"coordinates obj: ({self.lat}, {self.lng})"
