"""Exceptions shared by the page layer."""


class RedirectRequired(Exception):
    """Raised by a dependency when the request must go elsewhere first."""

    location = "/"

    def __init__(self, location: str | None = None):
        if location:
            self.location = location
        super().__init__(self.location)


class SetupRequired(RedirectRequired):
    """Backend credentials are missing from the environment."""

    location = "/setup"


class SignInRequired(RedirectRequired):
    """The route needs a session and there is none."""

    location = "/auth/sign-in"


class RecordAccessError(Exception):
    """The backend rejected a write (validation or permission failure)."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ProfileNotFoundError(Exception):
    """A page needs the viewer's profile and it does not exist."""
