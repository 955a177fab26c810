# backend/utils/errors.py
# Domain errors raised by services and translated to responses by the routes.


class StoreError(Exception):
    """Base class for storefront errors. ``message`` is safe to show to users."""

    message = "Ha ocurrido un error."

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(StoreError):
    message = "Todos los campos son obligatorios."


class DuplicateEmailError(StoreError):
    message = "Ese correo ya está registrado."


class InvalidCredentialsError(StoreError):
    # Same text for unknown email and wrong password
    message = "Correo o contraseña incorrectos."


class NotFoundError(StoreError):
    message = "Orden no encontrada."


class PersistenceError(StoreError):
    message = "Ocurrió un error al acceder a los datos. Inténtalo de nuevo más tarde."


class LoginRequired(Exception):
    """Raised by the auth gate when the session has no bound user."""
