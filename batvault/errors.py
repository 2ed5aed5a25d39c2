"""Eccezioni applicative di batvault"""


class BatvaultError(Exception):
    """Errore base dell'applicazione"""
    code = 'internal'
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def to_dict(self):
        return {'error': self.code, 'message': self.message}


class InvalidSchedule(BatvaultError):
    """Frequency or anchor data on a recurring definition is malformed or out of range."""
    code = 'invalid_schedule'
    status_code = 400


class StoreUnavailable(BatvaultError):
    """The record store failed a read or write."""
    code = 'store_unavailable'
    status_code = 503


class PartialPersistence(BatvaultError):
    """A transaction was posted but the definition could not be advanced."""
    code = 'partial_persistence'
    status_code = 500

    def __init__(self, message=None, transaction_id=None):
        super().__init__(message)
        self.transaction_id = transaction_id


class AuthenticationError(BatvaultError):
    code = 'unauthenticated'
    status_code = 401


class AuthorizationError(BatvaultError):
    code = 'unauthorized'
    status_code = 403


class InvalidRequest(BatvaultError):
    code = 'invalid_request'
    status_code = 400


class NotFound(BatvaultError):
    code = 'not_found'
    status_code = 404


class ProcessingInProgress(BatvaultError):
    """A processing run for the same owner is still in flight."""
    code = 'in_progress'
    status_code = 409
