"""Access-control error types."""


class AccessControlError(Exception):
    """Base class for access-control failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(AccessControlError):
    """Invalid credentials or expired session."""


class ProfileFetchError(AccessControlError):
    """The actor's profile could not be loaded."""


class AuthorizationDenied(AccessControlError):
    """Role or approval check failed."""


class AdminOperationError(AccessControlError):
    """A privileged operation (e.g. deleting a user) failed."""


class RegistrationError(AccessControlError):
    """A new identity's profile could not be created."""


class IdentityProviderError(Exception):
    """Error response or transport failure from the identity provider."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
