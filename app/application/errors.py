"""
Error taxonomy shared by use cases.

Each use-case module subclasses these (ClientValidationError,
PackageNotFoundError, ...) so routers can map a whole family to one
HTTP status.
"""


class UnauthenticatedError(PermissionError):
    """Нет аутентифицированного пользователя"""
    pass


class NotFoundError(LookupError):
    """Строка не существует или принадлежит другому аккаунту"""
    pass


class ValidationError(ValueError):
    """Некорректные входные данные или недопустимый переход состояния"""
    pass


class StoreError(RuntimeError):
    """Сбой хранилища (текст исходной ошибки сохраняется)"""
    pass
