"""Error taxonomy shared by the journey services and request handlers."""


class JourneyError(Exception):
    """Base error carrying the status code reported to callers."""

    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(JourneyError):
    status = 400


class UserNotFound(JourneyError):
    status = 404

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class StorageUnavailable(JourneyError):
    status = 503


class PartialLookupFailure(JourneyError):
    """A secondary lookup failed; callers degrade instead of aborting."""
