"""Exceptions raised by the CinemaBook client."""

from typing import Dict, Optional

from cinemabook.messages import Notice, failure


class CinemaBookError(Exception):
    """Base class. Every error carries the notice the user should see."""

    def __init__(self, message: str = "", notice: Optional[Notice] = None):
        super().__init__(message)
        self.notice = notice or failure(message or "Đã có lỗi xảy ra")


class ApiError(CinemaBookError):
    """Non-2xx response or transport failure.

    The message is ``"<status>: <body>"`` so callers can match on the text
    the server sent back.
    """

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status


class AuthRequired(CinemaBookError):
    def __init__(self, notice: Optional[Notice] = None):
        super().__init__("login required", notice or failure("Vui lòng đăng nhập để tiếp tục.", title="Chưa đăng nhập"))


class PermissionDenied(CinemaBookError):
    pass


class FormError(CinemaBookError):
    """Form input failed validation; ``errors`` maps field name to message."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        summary = "; ".join(f"{field}: {msg}" for field, msg in errors.items())
        super().__init__(summary, failure(summary, title="Dữ liệu không hợp lệ"))


class BookingError(CinemaBookError):
    pass


class PromoError(CinemaBookError):
    pass


class AccountError(CinemaBookError):
    pass


class AdminError(CinemaBookError):
    pass
