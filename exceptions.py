"""
Errors raised by the telephony and speech adapters.
"""


class BridgeError(Exception):
    """Base class for call-scoped bridge failures."""


class ConnectionClosed(BridgeError):
    """A send was attempted on a connection that is already closed.

    Callers must not retry; the bridge treats it as the end of the call.
    """


class SpeechSessionError(BridgeError):
    """The speech-model session failed to open or closed abruptly."""
