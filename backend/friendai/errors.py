# error taxonomy shared by services and routers
# main.py maps each class to its http status

from typing import Optional


class AppError(Exception):
    """base for errors that surface to the client as a json detail"""

    status_code: int = 500

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class AuthError(AppError):
    """bad credentials (401) or a bad token (403)"""
    status_code = 401


class ConflictError(AppError):
    status_code = 409


class NotFoundError(AppError):
    status_code = 404


class UpstreamError(AppError):
    """external ai or speech service failed or is not configured"""
    status_code = 502


class InternalError(AppError):
    status_code = 500
