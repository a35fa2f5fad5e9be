"""
Error taxonomy for the storefront
"""


class BookstallError(Exception):
    """Base class for storefront errors"""


class FeedUnavailable(BookstallError):
    """The catalog feed could not be fetched or parsed"""


class ValidationRejected(BookstallError):
    """A user intent was refused; state is left unchanged"""


class NotificationFailed(BookstallError):
    """The order notifier could not be reached or refused the order"""
