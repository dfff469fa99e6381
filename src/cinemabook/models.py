"""View models for the booking API resources.

The API speaks camelCase JSON; models accept either camelCase or snake_case
and dump back to camelCase with ``to_api()``.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for everything that comes over the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Cinema(ApiModel):
    """Cinema venue."""

    id: int
    name: str
    address: str = ""
    phone: str | None = None


class Room(ApiModel):
    """Screening room inside a cinema."""

    id: int
    cinema_id: int
    name: str
    capacity: int | None = None
    cinema: Cinema | None = None

    @property
    def seat_count(self) -> int:
        return self.capacity or 100


class Movie(ApiModel):
    """Movie in the catalog."""

    id: int
    title: str
    description: str = ""
    genre: str = ""
    duration: int = 0  # minutes
    age_rating: str = ""
    poster_url: str | None = None
    trailer_url: str | None = None
    director: str | None = None
    actors: list[str] = []
    status: str = "active"  # active, coming-soon, inactive
    release_date: datetime | None = None
    average_rating: float | None = None
    review_count: int | None = None

    @property
    def is_showing(self) -> bool:
        return self.status == "active"

    @property
    def is_coming_soon(self) -> bool:
        return self.status == "coming-soon"


def price_to_int(price) -> int:
    """Wire prices are decimal strings; "85000.00" -> 85000."""
    try:
        return int(Decimal(str(price or "0")))
    except InvalidOperation:
        return 0


class Showtime(ApiModel):
    """One screening of a movie in a room."""

    id: int
    movie_id: int
    room_id: int
    start_time: datetime
    end_time: datetime | None = None
    price: str = "0"
    available_seats: list[str] = []
    room: Room | None = None
    movie: Movie | None = None

    @property
    def unit_price(self) -> int:
        return price_to_int(self.price)


class CustomerInfo(ApiModel):
    name: str
    phone: str
    email: str


class Ticket(ApiModel):
    """A confirmed or pending booking."""

    id: int
    booking_code: str = ""
    showtime_id: int | None = None
    seats: list[str] = []
    total_price: str = "0"
    payment_method: str | None = None
    status: str = "pending"
    customer_info: CustomerInfo | None = None
    movie: Movie | None = None
    showtime: Showtime | None = None

    @property
    def amount(self) -> int:
        return price_to_int(self.total_price)


class User(ApiModel):
    id: int
    username: str = ""
    email: str = ""
    full_name: str = ""
    phone: str | None = None
    role: str = "user"  # user, staff, admin


class Promotion(ApiModel):
    id: int
    code: str = ""
    title: str = ""
    description: str = ""
    discount_value: float = 0
    status: str = "active"
    end_date: datetime | None = None


class Review(ApiModel):
    id: int
    movie_id: int | None = None
    rating: int = Field(0, ge=0, le=5)
    comment: str | None = None


class AuthResult(ApiModel):
    token: str
    user: User


class PromoValidation(ApiModel):
    code: str
    discount: float = 0


class BookingData(ApiModel):
    """Body of POST /api/bookings."""

    showtime_id: int
    seats: list[str]
    total_price: str
    payment_method: str
    customer_info: CustomerInfo
