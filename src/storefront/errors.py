"""Error kinds raised inside the store and its gateways.

Every error carries a ``message`` fit for showing to the user. Store
operations catch ``StoreError`` at their boundary and publish the message in
the state's ``error`` field.
"""


class StoreError(Exception):
    default_message = "Something went wrong"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StoreError):
    """Bad input detected on the client; never sent to the collaborator."""

    default_message = "Invalid input"


class AuthError(StoreError):
    """Credentials rejected, or an operation needs a signed-in user."""

    default_message = "Invalid email or password"


class ConflictError(StoreError):
    """The collaborator rejected a create because of a uniqueness rule."""

    default_message = "This record already exists"


class PersistenceError(StoreError):
    """Any other collaborator failure, including connectivity."""

    default_message = "Could not reach the server. Please try again."


class CollaboratorTimeoutError(StoreError):
    """A collaborator call did not answer within the configured timeout."""

    default_message = "The server took too long to respond. Please try again."


class ParseError(StoreError):
    """An order item snapshot could not be read; recovered where raised."""

    default_message = "Unreadable order items"
