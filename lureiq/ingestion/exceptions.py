"""
Client exceptions.
Error taxonomy for the external data sources and the feedback collector.
"""


class ClientError(Exception):
    """Base exception for all external client errors"""

    def __init__(self, message: str, source: str, status_code: int | None = None):
        self.message = message
        self.source = source
        self.status_code = status_code
        super().__init__(self.message)


class WeatherError(ClientError):
    """Weather source unreachable or returned an unusable payload"""

    pass


class GeocodingError(ClientError):
    """Geocoding source unreachable"""

    pass


class CollectorError(ClientError):
    """Feedback collector rejected the batch or could not be reached"""

    pass
