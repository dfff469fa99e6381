"""
Form schemas
============

Input shape checks done before anything is sent to the API. Messages are the
Vietnamese texts shown next to each field; ``validate_form`` turns a pydantic
``ValidationError`` into ``FormError`` with a ``{field: message}`` map.

Fields default to empty values the way an untouched form does, so a missing
field reports the same message as an empty one.
"""

import re
from datetime import datetime, timezone
from typing import Dict, Optional, Type, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from cinemabook.errors import FormError

F = TypeVar("F", bound="Form")

PAYMENT_METHODS = ("cash", "card", "momo", "banking")
USER_ROLES = ("user", "staff", "admin")

PHONE_RE = re.compile(r"[0-9]{10}")

# Seat codes every new showtime starts with: rows A-J, seats 1-12.
DEFAULT_SEAT_ROWS = 10
DEFAULT_SEATS_PER_ROW = 12


def default_seat_layout(rows: int = DEFAULT_SEAT_ROWS, per_row: int = DEFAULT_SEATS_PER_ROW) -> list[str]:
    return [f"{chr(ord('A') + r)}{n}" for r in range(rows) for n in range(1, per_row + 1)]


def _invalid(kind: str, message: str) -> PydanticCustomError:
    return PydanticCustomError(kind, message)


def _min_length(value: str, size: int, message: str) -> str:
    # counted on the raw text, surrounding spaces included
    value = value or ""
    if len(value) < size:
        raise _invalid("too_short", message)
    return value


def _email(value: str) -> str:
    value = (value or "").strip()
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise _invalid("email", "Email không hợp lệ")
    return value


def form_errors(exc: ValidationError) -> Dict[str, str]:
    """First message per field, keyed by field name."""
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"]) or "__all__"
        errors.setdefault(field, err["msg"])
    return errors


def validate_form(form_class: Type[F], data) -> F:
    """Build ``form_class`` from a dict (or pass an instance through)."""
    if isinstance(data, form_class):
        return data
    try:
        return form_class.model_validate(data)
    except ValidationError as e:
        raise FormError(form_errors(e))


class Form(BaseModel):
    """Defaults are validated too, so an untouched field gets its message."""

    model_config = ConfigDict(validate_default=True)


# =============================================================================
# CUSTOMER FORMS
# =============================================================================

class BookingForm(Form):
    customer_name: str = ""
    customer_phone: str = ""
    customer_email: str = ""
    payment_method: str = "cash"
    promo_code: Optional[str] = None

    @field_validator("customer_name")
    @classmethod
    def check_name(cls, v):
        return _min_length(v, 2, "Tên phải có ít nhất 2 ký tự")

    @field_validator("customer_phone")
    @classmethod
    def check_phone(cls, v):
        v = v or ""
        if not PHONE_RE.fullmatch(v):
            raise _invalid("phone", "Số điện thoại phải có 10 chữ số")
        return v

    @field_validator("customer_email")
    @classmethod
    def check_email(cls, v):
        return _email(v)

    @field_validator("payment_method")
    @classmethod
    def check_payment(cls, v):
        if v not in PAYMENT_METHODS:
            raise _invalid("payment_method", "Phương thức thanh toán không hợp lệ")
        return v

    @field_validator("promo_code")
    @classmethod
    def check_promo(cls, v):
        v = (v or "").strip()
        return v or None

    def customer_info(self) -> dict:
        return {
            "name": self.customer_name,
            "phone": self.customer_phone,
            "email": self.customer_email,
        }


class LoginForm(Form):
    email: str = ""
    password: str = ""

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if len(v or "") < 6:
            raise _invalid("password", "Mật khẩu phải có ít nhất 6 ký tự")
        return v

    def to_payload(self) -> dict:
        return {"email": self.email, "password": self.password}


class RegisterForm(Form):
    username: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    full_name: str = ""
    phone: Optional[str] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, v):
        return _min_length(v, 3, "Tên đăng nhập phải có ít nhất 3 ký tự")

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if len(v or "") < 6:
            raise _invalid("password", "Mật khẩu phải có ít nhất 6 ký tự")
        return v

    @field_validator("confirm_password")
    @classmethod
    def check_confirm(cls, v, info: ValidationInfo):
        # password is absent from info.data when it failed its own check
        password = info.data.get("password")
        if password is not None and v != password:
            raise _invalid("password_mismatch", "Mật khẩu xác nhận không khớp")
        return v

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, v):
        return _min_length(v, 2, "Họ tên phải có ít nhất 2 ký tự")

    def to_payload(self) -> dict:
        payload = {
            "username": self.username,
            "email": self.email,
            "password": self.password,
            "fullName": self.full_name,
            "role": "user",
        }
        if self.phone:
            payload["phone"] = self.phone
        return payload


# =============================================================================
# ADMIN FORMS
# =============================================================================

class MovieForm(Form):
    title: str = ""
    description: str = ""
    genre: str = ""
    duration: int = 0
    age_rating: str = ""
    poster_url: Optional[str] = None
    trailer_url: Optional[str] = None
    director: Optional[str] = None
    actors: Optional[str] = None  # comma-separated
    status: str = "active"

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        return _min_length(v, 1, "Tên phim là bắt buộc")

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        return _min_length(v, 1, "Mô tả là bắt buộc")

    @field_validator("genre")
    @classmethod
    def check_genre(cls, v):
        return _min_length(v, 1, "Thể loại là bắt buộc")

    @field_validator("duration", mode="before")
    @classmethod
    def check_duration(cls, v):
        try:
            minutes = int(v)
        except (TypeError, ValueError):
            raise _invalid("duration", "Thời lượng phải là số")
        if minutes < 1:
            raise _invalid("duration", "Thời lượng phải lớn hơn 0")
        return minutes

    @field_validator("age_rating")
    @classmethod
    def check_age_rating(cls, v):
        return _min_length(v, 1, "Giới hạn tuổi là bắt buộc")

    @field_validator("actors", mode="before")
    @classmethod
    def check_actors(cls, v):
        if isinstance(v, (list, tuple)):
            return ", ".join(str(a) for a in v)
        return v

    def actor_list(self) -> list[str]:
        if not self.actors:
            return []
        return [a.strip() for a in self.actors.split(",") if a.strip()]

    def to_payload(self, new: bool = False) -> dict:
        payload = {
            "title": self.title,
            "description": self.description,
            "genre": self.genre,
            "duration": self.duration,
            "ageRating": self.age_rating,
            "posterUrl": self.poster_url or "",
            "trailerUrl": self.trailer_url or "",
            "director": self.director or "",
            "actors": self.actor_list(),
            "status": self.status or "active",
        }
        if new:
            payload["releaseDate"] = datetime.now(timezone.utc).isoformat()
        return payload


class CinemaForm(Form):
    name: str = ""
    address: str = ""
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return _min_length(v, 1, "Tên rạp là bắt buộc")

    @field_validator("address")
    @classmethod
    def check_address(cls, v):
        return _min_length(v, 1, "Địa chỉ là bắt buộc")

    def to_payload(self, new: bool = False) -> dict:
        return {"name": self.name, "address": self.address, "phone": self.phone or ""}


class ShowtimeForm(Form):
    movie_id: Optional[int] = None
    room_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    price: str = ""

    @field_validator("movie_id")
    @classmethod
    def check_movie(cls, v):
        if not v:
            raise _invalid("required", "Vui lòng chọn phim")
        return v

    @field_validator("room_id")
    @classmethod
    def check_room(cls, v):
        if not v:
            raise _invalid("required", "Vui lòng chọn phòng chiếu")
        return v

    @field_validator("start_time")
    @classmethod
    def check_start(cls, v):
        if v is None:
            raise _invalid("required", "Vui lòng chọn thời gian bắt đầu")
        return v

    @field_validator("end_time")
    @classmethod
    def check_end(cls, v, info: ValidationInfo):
        if v is None:
            raise _invalid("required", "Vui lòng chọn thời gian kết thúc")
        start = info.data.get("start_time")
        if start is not None and v <= start:
            raise _invalid("end_before_start", "Thời gian kết thúc phải sau thời gian bắt đầu")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def check_price(cls, v):
        v = "" if v is None else str(v).strip()
        if not v:
            raise _invalid("required", "Giá vé là bắt buộc")
        return v

    def to_payload(self, new: bool = False) -> dict:
        return {
            "movieId": self.movie_id,
            "roomId": self.room_id,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "price": self.price,
            "availableSeats": default_seat_layout(),
        }


class UserRoleForm(Form):
    role: str = ""

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        if v not in USER_ROLES:
            raise _invalid("role", "Vai trò không hợp lệ")
        return v
