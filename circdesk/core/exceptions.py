class CircDeskError(Exception):
    """Base for every lending-engine error.

    `code` is a stable machine identifier, `category` groups codes into
    the families callers present differently.
    """
    code = "error"
    category = "error"
    default_message = "Operation failed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


# Expected, recoverable outcomes

class NotFoundError(CircDeskError):
    code = "not_found"
    category = "not_found"

class BookNotFoundError(NotFoundError):
    code = "book_not_found"
    default_message = "Book does not exist."

class ReaderNotFoundError(NotFoundError):
    code = "reader_not_found"
    default_message = "Reader does not exist."

class BorrowRecordNotFoundError(NotFoundError):
    code = "borrow_record_not_found"
    default_message = "Borrow record does not exist."

class ReservationNotFoundError(NotFoundError):
    code = "reservation_not_found"
    default_message = "Reservation does not exist."


class InvalidStateError(CircDeskError):
    code = "invalid_state"
    category = "invalid_state"

class BookDeletedError(InvalidStateError):
    code = "book_deleted"
    default_message = "Book has been deleted."

class BookUnavailableError(InvalidStateError):
    code = "book_unavailable"
    default_message = "Book is not available for lending."

class BookAlreadyOnLoanError(InvalidStateError):
    code = "book_on_loan"
    default_message = "Book already has an open loan."

class ReaderInactiveError(InvalidStateError):
    code = "reader_inactive"
    default_message = "Reader is not active."

class AlreadyReturnedError(InvalidStateError):
    code = "already_returned"
    default_message = "Book has already been returned."

class AlreadyProcessedError(InvalidStateError):
    code = "already_processed"
    default_message = "Reservation has already been processed."

class InvalidTransition(InvalidStateError):
    code = "invalid_transition"
    default_message = "Book status does not permit this operation."

class SweepInProgressError(InvalidStateError):
    code = "sweep_in_progress"
    default_message = "Sweep is already running."

class BookStatusConflictError(InvalidStateError):
    code = "book_conflict"
    default_message = "Book status was changed by another transaction."


class PolicyViolationError(CircDeskError):
    code = "policy_violation"
    category = "policy_violation"

class QuotaExceededError(PolicyViolationError):
    code = "quota_exceeded"
    default_message = "Reader has reached the maximum number of borrowed books."

class RenewalNotPermittedError(PolicyViolationError):
    code = "renewal_not_permitted"
    default_message = "Reader type does not allow renewals."

class RenewalLimitExceededError(PolicyViolationError):
    code = "renewal_limit_exceeded"
    default_message = "Maximum number of renewals reached."

class DuplicateReservationError(PolicyViolationError):
    code = "duplicate_reservation"
    default_message = "Reader already holds a reservation for this book."


EXPECTED_ERRORS = (NotFoundError, InvalidStateError, PolicyViolationError)


# Unexpected failures

class PersistenceFailure(CircDeskError):
    code = "persistence_failure"
    category = "persistence_failure"
    default_message = "Transaction could not be committed."

class AuditFailure(CircDeskError):
    code = "audit_failure"
    category = "audit_failure"
    default_message = "Operation log could not be written."
