"""
Errors raised inside the posting pipeline.

None of these escape the dispatcher: they are turned into failed PostResults.
"""


class PostingError(Exception):
    """Base class for posting failures"""


class PlatformPostError(PostingError):
    """A platform route rejected the post or answered with an error"""

    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)


class PlatformUnavailable(PostingError):
    """Call refused locally by the circuit breaker or the rate limiter"""
