"""
Exception hierarchy for the quote parser.

Capture errors abort the run; MalformedMessage is local to one payload.
"""


class QuoteParserError(Exception):
    """Base class for every error raised by the parser."""


class CaptureError(QuoteParserError):
    """The input is not a valid capture; no later record boundary can be trusted."""


class MalformedCapture(CaptureError):
    """Global header magic or version not recognized."""


class TruncatedRecord(CaptureError):
    """A record header claims more bytes than remain in the file."""


class TruncatedFrame(CaptureError):
    """A protocol header claims more bytes than remain in the frame."""


class MalformedMessage(QuoteParserError):
    """A tagged payload does not fit the quote layout."""


class NoMessagesFound(QuoteParserError):
    """The whole capture produced zero quotes."""
