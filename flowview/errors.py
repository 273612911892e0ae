"""Exception types raised by flowview."""


class FlowViewError(Exception):
    """Base class for all flowview errors."""


class MalformedEventError(FlowViewError, ValueError):
    """Raised when an inbound event payload cannot be parsed or validated."""


class FrameError(FlowViewError, ValueError):
    """Raised when a STOMP frame cannot be decoded."""


class PatternClientError(FlowViewError):
    """Raised when a call to the pattern API fails."""


class PatternNotFoundError(PatternClientError):
    """Raised when the pattern API answers 404 for a pattern id."""


class HumanInputSubmissionError(PatternClientError):
    """Raised when the orchestration backend rejects a human-input answer."""
