"""Backend errors that are not Protean's own, and message helpers."""


class AuthenticationFailed(Exception):
    """Raised when an email/password pair matches no account."""

    def __init__(self, message="Invalid email or password"):
        super().__init__(message)
        self.message = message


def first_error_message(messages) -> str:
    """Pick the first message out of a Protean ``{field: [messages]}`` mapping."""
    if isinstance(messages, dict):
        for field_messages in messages.values():
            if isinstance(field_messages, (list, tuple)) and field_messages:
                return str(field_messages[0])
            if field_messages:
                return str(field_messages)
    return str(messages) if messages else "Invalid request"
