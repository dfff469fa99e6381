"""User-facing notices, Vietnamese message catalogue and vi-VN formatting."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


@dataclass(frozen=True)
class Notice:
    """A short message shown to the user after an action."""

    title: str
    description: str = ""
    variant: str = "default"  # default, destructive

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"

    def __str__(self) -> str:
        icon = "❌" if self.is_error else "✅"
        if self.description:
            return f"{icon} {self.title}: {self.description}"
        return f"{icon} {self.title}"


def success(description: str, title: str = "Thành công") -> Notice:
    return Notice(title=title, description=description)


def failure(description: str, title: str = "Lỗi") -> Notice:
    return Notice(title=title, description=description, variant="destructive")


# =============================================================================
# BOOKING
# =============================================================================

BOOKING_SUCCESS = success(
    "Vé của bạn đã được đặt thành công. Kiểm tra email để xem chi tiết.",
    title="Đặt vé thành công!",
)
BOOKING_FAILED_TITLE = "Lỗi đặt vé"
BOOKING_FAILED = "Có lỗi xảy ra khi đặt vé. Vui lòng thử lại."
SEATS_ALREADY_BOOKED = "Một số ghế đã được đặt trước. Vui lòng chọn ghế khác."
SEATS_NOT_AVAILABLE = "Ghế bạn chọn không còn trống. Vui lòng chọn ghế khác."
LOGIN_TO_BOOK = failure("Vui lòng đăng nhập để đặt vé.", title="Chưa đăng nhập")

# Checked in order against the error text; first hit wins.
BOOKING_ERROR_PATTERNS = [
    ("already booked", SEATS_ALREADY_BOOKED),
    ("not available", SEATS_NOT_AVAILABLE),
]

PROMO_APPLIED_TITLE = "Áp dụng mã khuyến mãi thành công!"
PROMO_INVALID = failure("Vui lòng kiểm tra lại mã khuyến mãi.", title="Mã khuyến mãi không hợp lệ")

# =============================================================================
# ACCOUNTS
# =============================================================================

LOGIN_SUCCESS_TITLE = "Đăng nhập thành công"
LOGIN_FAILED_TITLE = "Đăng nhập thất bại"
LOGIN_FAILED = "Vui lòng kiểm tra lại thông tin đăng nhập"
REGISTER_SUCCESS_TITLE = "Đăng ký thành công"
REGISTER_FAILED_TITLE = "Đăng ký thất bại"
REGISTER_FAILED = "Vui lòng kiểm tra lại thông tin đăng ký"
PERMISSION_DENIED = failure("Bạn không có quyền truy cập trang này.", title="Không có quyền")

PAYMENT_METHODS = {
    "cash": "Tiền mặt tại rạp",
    "card": "Thẻ tín dụng",
    "momo": "Ví MoMo",
    "banking": "Chuyển khoản ngân hàng",
}

TICKET_STATUSES = {
    "confirmed": "Đã xác nhận",
}
TICKET_STATUS_PENDING = "Chờ xác nhận"

MISSING = "N/A"


def welcome(full_name: str) -> str:
    return f"Chào mừng {full_name}!"


def booking_error_message(error) -> str:
    """Translate a failed booking into a fixed message by substring match."""
    text = str(error) if error is not None else ""
    for needle, message in BOOKING_ERROR_PATTERNS:
        if needle in text:
            return message
    return BOOKING_FAILED


def error_text(error, fallback: str) -> str:
    """Server error text when there is any, the fixed fallback otherwise."""
    text = str(error).strip() if error is not None else ""
    return text or fallback


# =============================================================================
# FORMATTING (vi-VN)
# =============================================================================

def _to_int(amount) -> int:
    if isinstance(amount, str):
        amount = amount.strip() or "0"
    try:
        return int(Decimal(amount).quantize(Decimal("1"), ROUND_HALF_UP))
    except (InvalidOperation, ValueError, TypeError):
        return 0


def format_number(amount) -> str:
    """Group thousands with dots, e.g. 150000 -> '150.000'."""
    value = _to_int(amount)
    grouped = f"{abs(value):,}".replace(",", ".")
    return f"-{grouped}" if value < 0 else grouped


def format_price(amount) -> str:
    """VND currency text, e.g. 150000 -> '150.000 ₫'."""
    return f"{format_number(amount)} ₫"


def _parse_datetime(value) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        pass
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        try:
            value = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    # aware timestamps are shown in the viewer's local time
    return value.astimezone() if value.tzinfo else value


def format_date(value, default: str = "Chưa xác định") -> str:
    dt = _parse_datetime(value)
    return dt.strftime("%d/%m/%Y") if dt else default


def format_time(value, default: str = "") -> str:
    dt = _parse_datetime(value)
    return dt.strftime("%H:%M") if dt else default


def format_datetime(value, default: str = MISSING) -> str:
    dt = _parse_datetime(value)
    return dt.strftime("%H:%M %d/%m/%Y") if dt else default


def format_rating(value) -> str:
    """One decimal with halves rounded up, e.g. 4.25 -> '4.3'."""
    try:
        rating = Decimal(str(value if value is not None else 0))
    except InvalidOperation:
        rating = Decimal(0)
    return str(rating.quantize(Decimal("0.1"), ROUND_HALF_UP))


def stars(rating) -> str:
    full = max(0, min(5, int(rating or 0)))
    return "★" * full + "☆" * (5 - full)
