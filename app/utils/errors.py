class AppError(Exception):
    """Base class for errors raised by the application."""


class ConfigurationError(AppError):
    """Question catalog or report configuration is inconsistent."""


class NotFoundError(AppError):
    pass


class ShareExpiredError(AppError):
    pass


class InvalidPhoneNumberError(AppError):
    pass


class SmsConfigurationError(AppError):
    pass


class SmsDeliveryError(AppError):
    pass


class StorageError(AppError):
    pass


class AdminAuthError(AppError):
    pass
