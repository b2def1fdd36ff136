class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    pass


class InvalidNumberError(ValidationError):
    """Raised when user input cannot be read as a number."""


class NotFoundError(AppError):
    pass


class InsufficientStockError(AppError):
    pass
