"""Exception types shared by the HealthMate backend."""


class HealthMateError(Exception):
    """Base error carrying a user-facing message and diagnostic details."""

    status_code = 500

    def __init__(self, message: str, details: str = "", status_code: int = None):
        super().__init__(message)
        self.message = message
        self.details = details or message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"error": self.message, "details": self.details}


class InvalidRequestError(HealthMateError):
    status_code = 400


class ModelError(HealthMateError):
    """The generative model could not be reached or returned an error."""

    status_code = 500


class PlacesError(HealthMateError):
    """A places/geocoding lookup failed. Always recovered internally."""

    status_code = 502
