"""
Back-office operations
======================

Admin-only calls for movies, cinemas, showtimes, users and tickets, plus the
dashboard numbers. Each resource manager knows its collection path, the form
that validates its input and the notices it reports. Every successful write
drops the cached queries under the keys it touched.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type

import pandas as pd

from cinemabook import messages
from cinemabook.config import OUTPUT_DIR
from cinemabook.errors import AdminError, ApiError
from cinemabook.forms import CinemaForm, Form, MovieForm, ShowtimeForm, UserRoleForm, validate_form
from cinemabook.messages import MISSING, Notice
from cinemabook.models import ApiModel, Cinema, Movie, Promotion, Review, Room, Showtime, Ticket, User
from cinemabook.services.base import BaseService

logger = logging.getLogger(__name__)

ADMIN = "admin"


class AdminBase(BaseService):

    def _require_admin(self) -> None:
        self.auth.require_role(ADMIN)

    def _write(self, method: str, path: str, payload, ok: str, failed: str,
               invalidates: List[tuple]) -> Notice:
        self._require_admin()
        try:
            self.api.request(method, path, payload)
        except ApiError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise AdminError(str(e), messages.failure(messages.error_text(e, failed))) from e
        self._invalidate(invalidates)
        logger.info(f"{method} {path} ok")
        return messages.success(ok)


class ResourceAdmin(AdminBase, ABC):
    """Create / update / delete for one REST collection."""

    @property
    @abstractmethod
    def collection_path(self) -> str:
        """e.g. "/api/movies"."""
        ...

    @property
    @abstractmethod
    def form_class(self) -> Type[Form]:
        ...

    @property
    @abstractmethod
    def model(self) -> Type[ApiModel]:
        ...

    @property
    @abstractmethod
    def notices(self) -> Dict[str, Tuple[str, str]]:
        """action -> (success text, fallback failure text) for create/update/delete."""
        ...

    @property
    def invalidates(self) -> List[tuple]:
        return [(self.collection_path,)]

    def list(self) -> list:
        return self._query_list(self.model, self.collection_path)

    def create(self, form) -> Notice:
        form = validate_form(self.form_class, form)
        ok, failed = self.notices["create"]
        return self._write("POST", self.collection_path, form.to_payload(new=True), ok, failed, self.invalidates)

    def update(self, item_id: int, form) -> Notice:
        form = validate_form(self.form_class, form)
        ok, failed = self.notices["update"]
        return self._write("PUT", f"{self.collection_path}/{item_id}", form.to_payload(), ok, failed, self.invalidates)

    def delete(self, item_id: int) -> Notice:
        ok, failed = self.notices["delete"]
        return self._write("DELETE", f"{self.collection_path}/{item_id}", None, ok, failed, self.invalidates)


class MovieAdmin(ResourceAdmin):
    collection_path = "/api/movies"
    form_class = MovieForm
    model = Movie
    notices = {
        "create": ("Phim đã được thêm thành công", "Không thể thêm phim"),
        "update": ("Phim đã được cập nhật thành công", "Không thể cập nhật phim"),
        "delete": ("Phim đã được xóa thành công", "Không thể xóa phim"),
    }

    @staticmethod
    def form_for(movie: Movie) -> MovieForm:
        """Pre-filled form for editing an existing movie."""
        return MovieForm(
            title=movie.title,
            description=movie.description,
            genre=movie.genre,
            duration=movie.duration,
            age_rating=movie.age_rating,
            poster_url=movie.poster_url or "",
            trailer_url=movie.trailer_url or "",
            director=movie.director or "",
            actors=", ".join(movie.actors),
            status=movie.status,
        )


class CinemaAdmin(ResourceAdmin):
    collection_path = "/api/cinemas"
    form_class = CinemaForm
    model = Cinema
    notices = {
        "create": ("Rạp chiếu đã được thêm thành công", "Không thể thêm rạp chiếu"),
        "update": ("Cập nhật rạp chiếu thành công", "Không thể cập nhật rạp chiếu"),
        "delete": ("Xóa rạp chiếu thành công", "Không thể xóa rạp chiếu"),
    }

    @staticmethod
    def form_for(cinema: Cinema) -> CinemaForm:
        return CinemaForm(name=cinema.name, address=cinema.address, phone=cinema.phone or "")


class ShowtimeAdmin(ResourceAdmin):
    collection_path = "/api/showtimes"
    form_class = ShowtimeForm
    model = Showtime
    notices = {
        "create": ("Thêm suất chiếu thành công", "Không thể thêm suất chiếu"),
        "update": ("Cập nhật suất chiếu thành công", "Không thể cập nhật suất chiếu"),
        "delete": ("Xóa suất chiếu thành công", "Không thể xóa suất chiếu"),
    }

    @property
    def invalidates(self) -> List[tuple]:
        # per-movie showtime lists live under /api/movies/<id>/showtimes
        return [("/api/showtimes",), ("/api/movies",)]

    @staticmethod
    def form_for(showtime: Showtime) -> ShowtimeForm:
        return ShowtimeForm(
            movie_id=showtime.movie_id,
            room_id=showtime.room_id,
            start_time=showtime.start_time,
            end_time=showtime.end_time,
            price=showtime.price,
        )


class UserAdmin(AdminBase):
    path = "/api/admin/users"

    def list(self) -> List[User]:
        self._require_admin()
        return self._query_list(User, self.path)

    def update_role(self, user_id: int, role: str) -> Notice:
        form = validate_form(UserRoleForm, {"role": role})
        return self._write("PUT", f"{self.path}/{user_id}", {"role": form.role},
                           "Cập nhật người dùng thành công", "Không thể cập nhật người dùng", [(self.path,)])

    def delete(self, user_id: int) -> Notice:
        return self._write("DELETE", f"{self.path}/{user_id}", None,
                           "Xóa người dùng thành công", "Không thể xóa người dùng", [(self.path,)])


class TicketAdmin(AdminBase):
    path = "/api/admin/all-tickets"

    def list(self) -> List[Ticket]:
        self._require_admin()
        return self._query_list(Ticket, self.path)

    @staticmethod
    def detail_text(ticket: Ticket) -> str:
        """Multi-line summary of one ticket."""
        showtime = ticket.showtime
        room = showtime.room if showtime else None
        cinema = room.cinema if room else None
        lines = [
            "Chi tiết vé:",
            "",
            f"Mã vé: {ticket.booking_code or MISSING}",
            f"Phim: {ticket.movie.title if ticket.movie else MISSING}",
            f"Suất chiếu: {messages.format_datetime(showtime.start_time) if showtime else MISSING}",
            f"Rạp: {cinema.name if cinema else MISSING}",
            f"Phòng: {room.name if room else MISSING}",
            f"Ghế: {', '.join(ticket.seats) or MISSING}",
            f"Tổng tiền: {messages.format_number(ticket.total_price)}đ",
            f"Khách hàng: {ticket.customer_info.name if ticket.customer_info else MISSING}",
            f"Phương thức thanh toán: {ticket.payment_method or MISSING}",
        ]
        return "\n".join(lines)

    @staticmethod
    def status_label(ticket: Ticket) -> str:
        return messages.TICKET_STATUSES.get(ticket.status, messages.TICKET_STATUS_PENDING)

    def to_dataframe(self, tickets: List[Ticket]) -> pd.DataFrame:
        rows = []
        for t in tickets:
            showtime = t.showtime
            room = showtime.room if showtime else None
            rows.append({
                'booking_code': t.booking_code,
                'customer_name': t.customer_info.name if t.customer_info else '',
                'customer_email': t.customer_info.email if t.customer_info else '',
                'movie_title': t.movie.title if t.movie else '',
                'cinema_name': room.cinema.name if room and room.cinema else '',
                'room_name': room.name if room else '',
                'start_time': showtime.start_time.isoformat() if showtime else '',
                'seats': ', '.join(t.seats),
                'total_price': t.amount,
                'payment_method': t.payment_method or '',
                'status': t.status,
            })
        return pd.DataFrame(rows)

    def to_csv(self, tickets: List[Ticket], filename: Optional[str] = None) -> Path:
        """Save tickets to a flat CSV under OUTPUT_DIR (or at ``filename`` if it has a directory)."""
        if filename is None:
            filename = f"tickets_{datetime.now().strftime('%Y-%m-%d_%H%M%S')}.csv"

        filepath = Path(filename)
        if filepath.parent == Path("."):
            filepath = OUTPUT_DIR / filepath
        filepath.parent.mkdir(parents=True, exist_ok=True)

        df = self.to_dataframe(tickets)
        df.to_csv(filepath, index=False, encoding='utf-8')
        logger.info(f"💾 Saved {len(tickets)} tickets to {filepath}")
        return filepath


# =============================================================================
# DASHBOARD
# =============================================================================

@dataclass
class DashboardStats:
    total_movies: int
    total_cinemas: int
    total_tickets: int
    total_revenue: float
    total_reviews: int
    avg_rating: str  # one decimal, "0" when there are no reviews


@dataclass
class SeatOccupancy:
    occupied: int
    capacity: int
    available: int

    @property
    def level(self) -> str:
        """empty (nothing sold), high (under half the seats left), medium."""
        if self.available == self.capacity:
            return "empty"
        if self.available < self.capacity / 2:
            return "high"
        return "medium"

    @property
    def badge(self) -> str:
        return f"{self.occupied}/{self.capacity} ghế"

    @property
    def label(self) -> str:
        if self.occupied == 0:
            return "Còn trống"
        if self.occupied == self.capacity:
            return "Hết vé"
        return f"{self.available} ghế trống"


def seat_occupancy(showtime: Showtime, room: Optional[Room], default_capacity: int = 120) -> SeatOccupancy:
    capacity = (room.capacity if room else None) or default_capacity
    available = len(showtime.available_seats)
    return SeatOccupancy(occupied=capacity - available, capacity=capacity, available=available)


class AdminService(AdminBase):
    """Entry point for the back-office; one manager per resource."""

    def __init__(self, api, cache, auth):
        super().__init__(api, cache, auth)
        self.movies = MovieAdmin(api, cache, auth)
        self.cinemas = CinemaAdmin(api, cache, auth)
        self.showtimes = ShowtimeAdmin(api, cache, auth)
        self.users = UserAdmin(api, cache, auth)
        self.tickets = TicketAdmin(api, cache, auth)

    def rooms(self) -> List[Room]:
        return self._query_list(Room, "/api/rooms")

    def reviews(self) -> List[Review]:
        return self._query_list(Review, "/api/reviews")

    def promotions(self) -> List[Promotion]:
        return self._query_list(Promotion, "/api/promotions")

    def stats(self) -> DashboardStats:
        self._require_admin()
        tickets = self.tickets.list()
        reviews = self.reviews()
        avg = messages.format_rating(Decimal(sum(r.rating for r in reviews)) / len(reviews)) if reviews else "0"
        return DashboardStats(
            total_movies=len(self.movies.list()),
            total_cinemas=len(self.cinemas.list()),
            total_tickets=len(tickets),
            total_revenue=sum(float(t.total_price or 0) for t in tickets),
            total_reviews=len(reviews),
            avg_rating=avg,
        )

    def showtime_occupancy(self) -> List[Tuple[Showtime, SeatOccupancy]]:
        self._require_admin()
        rooms = {r.id: r for r in self.rooms()}
        return [(s, seat_occupancy(s, rooms.get(s.room_id))) for s in self.showtimes.list()]
