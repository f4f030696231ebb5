
class FolioAPIError(Exception):
    status_code = 500
    message = "An unexpected error occurred"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidInputError(FolioAPIError):
    status_code = 400
    message = "Invalid input"

class UnauthorizedError(FolioAPIError):
    status_code = 401
    message = "Unauthorized"

class NotFoundError(FolioAPIError):
    status_code = 404
    message = "Not found"

class ConflictError(FolioAPIError):
    status_code = 409
    message = "Conflict"

class InternalError(FolioAPIError):
    status_code = 500

class TransientError(FolioAPIError):
    status_code = 503
    message = "Service temporarily unavailable, please retry"


class InvalidIdError(InvalidInputError): pass

class BulkLimitError(InvalidInputError): pass

class InvalidCredentialsError(UnauthorizedError):
    message = "Invalid email or password"

class InvalidTokenError(UnauthorizedError):
    message = "Invalid or expired token"

class AuthorNotFoundError(NotFoundError):
    message = "Author not found"

class BookNotFoundError(NotFoundError):
    message = "Book not found"

class UserNotFoundError(NotFoundError):
    message = "User not found"

class LoanNotFoundError(NotFoundError):
    message = "Loan not found"

class EmailExistsError(ConflictError):
    message = "Email already exists"

class BookUnavailableError(ConflictError):
    message = "Book is not available"

class LoanAlreadyReturnedError(ConflictError):
    message = "Loan is already returned"

class ActiveLoanError(ConflictError):
    message = "Resource is referenced by an active loan"

class DatabaseError(InternalError): pass

class MissingBookError(InternalError):
    message = "Associated book not found"

class DatastoreTimeoutError(TransientError): pass
