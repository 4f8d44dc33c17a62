"""Errors raised by the relay layer."""


class RelayError(Exception):
    """A client message the relay refuses.

    The message is reported back to the offending client as
    ``relay:error {message}``; the room keeps running.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_envelope(self) -> dict:
        return {"type": "relay:error", "payload": {"message": self.message}}
