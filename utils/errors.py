from flask import jsonify


class AppError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class AuthError(AppError):
    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class InvalidTransitionError(ConflictError):
    pass


class StoreError(AppError):
    status_code = 500


class TransportError(AppError):
    status_code = 502


class StoreBusyError(AppError):
    status_code = 503


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        return jsonify(error=exc.message), exc.status_code
