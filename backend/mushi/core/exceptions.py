# mushi/core/exceptions.py


class MushiError(Exception):
    """Base class for gallery errors."""


class FetchError(MushiError):
    """Catalog or saved-set read failed."""


class RemotePersistError(MushiError):
    """Remote write of a toggle failed. Local state is kept."""


class StorageError(MushiError):
    """Object storage upload or URL resolution failed."""


class AuthRequired(MushiError):
    """No session on a protected view; callers redirect to the entry point."""

    def __init__(self, redirect_to: str = "/"):
        super().__init__(f"Authentication required, redirect to {redirect_to}")
        self.redirect_to = redirect_to
