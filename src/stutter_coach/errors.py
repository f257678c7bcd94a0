"""Error taxonomy shared by the services and the HTTP layer."""


class CoachError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CoachError):
    """Missing or duplicate request fields."""

    status_code = 400


class NotFoundError(CoachError):
    status_code = 404


class UserNotFoundError(NotFoundError):
    def __init__(self, username: str):
        super().__init__("User not found")
        self.username = username


class ChallengeNotFoundError(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__("No active challenge")
        self.user_id = user_id


class AuthError(CoachError):
    status_code = 401


class UpstreamFailure(CoachError):
    """An external collaborator was unreachable, timed out or errored.

    The message is what the client sees; the cause is only logged.
    """

    status_code = 500


class DecodeFailure(Exception):
    """The language collaborator replied with something that is not a suggestion."""
