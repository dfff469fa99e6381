"""
Seat selection and checkout
===========================

One ``BookingFlow`` per chosen showtime:

    flow.select_seats(["A1", "A2"])
    flow.apply_promo("SUMMER10")      # optional, POST /api/promotions/validate
    flow.submit(form)                 # POST /api/bookings

Both calls are plain request/response. A failure is final for that action:
nothing is retried and the user re-submits by hand.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from cinemabook import messages
from cinemabook.errors import ApiError, AuthRequired, BookingError, PromoError
from cinemabook.forms import BookingForm, validate_form
from cinemabook.messages import Notice
from cinemabook.models import BookingData, CustomerInfo, PromoValidation, Showtime, Ticket
from cinemabook.services.base import BaseService, parse_response

logger = logging.getLogger(__name__)


def amount_text(value: float) -> str:
    """Price as the API expects it: "135000", not "135000.0"."""
    return str(int(value)) if float(value).is_integer() else str(value)


@dataclass
class BookingResult:
    notice: Notice
    ticket: Optional[Ticket] = None


class BookingFlow(BaseService):
    """Checkout state for a single showtime."""

    def __init__(self, api, cache, auth, showtime: Showtime):
        super().__init__(api, cache, auth)
        self.showtime = showtime
        self.selected_seats: List[str] = []
        self.promo_discount: float = 0
        self.applied_promo: str = ""

    # -------------------------------------------------------------------------
    # Seats and price
    # -------------------------------------------------------------------------

    def select_seats(self, seats: List[str]) -> List[str]:
        picked = []
        for seat in seats:
            seat = seat.strip().upper()
            if seat and seat not in picked:
                picked.append(seat)
        if not picked:
            raise BookingError("no seats selected", messages.failure("Vui lòng chọn ít nhất một ghế.", title=messages.BOOKING_FAILED_TITLE))

        available = set(self.showtime.available_seats)
        taken = [s for s in picked if s not in available]
        if taken:
            logger.info(f"Seats not available for showtime {self.showtime.id}: {', '.join(taken)}")
            raise BookingError(
                f"seats not available: {', '.join(taken)}",
                messages.failure(messages.SEATS_NOT_AVAILABLE, title=messages.BOOKING_FAILED_TITLE),
            )

        self.selected_seats = picked
        return picked

    @property
    def total_price(self) -> int:
        return len(self.selected_seats) * self.showtime.unit_price

    @property
    def final_price(self) -> float:
        return self.total_price - self.promo_discount

    def reset(self) -> None:
        self.selected_seats = []
        self.promo_discount = 0
        self.applied_promo = ""

    def _require_login(self) -> None:
        if not self.auth.is_authenticated():
            raise AuthRequired(messages.LOGIN_TO_BOOK)

    # -------------------------------------------------------------------------
    # Promo code
    # -------------------------------------------------------------------------

    def apply_promo(self, code: Optional[str]) -> Optional[Notice]:
        """Validate a promo code against the current total.

        A blank code does nothing. A rejected code keeps whatever discount
        was applied before.
        """
        code = (code or "").strip()
        if not code:
            return None
        self._require_login()

        try:
            data = self.api.post("/api/promotions/validate", {"code": code, "totalPrice": self.total_price})
            result = parse_response(PromoValidation, data)
        except ApiError as e:
            logger.info(f"Promo code {code!r} rejected: {e}")
            raise PromoError(str(e), messages.PROMO_INVALID) from e

        self.promo_discount = result.discount
        self.applied_promo = result.code
        logger.info(f"Promo {result.code} applied, discount {result.discount}")
        return messages.success(
            f"Bạn được giảm {messages.format_price(result.discount)}",
            title=messages.PROMO_APPLIED_TITLE,
        )

    # -------------------------------------------------------------------------
    # Booking
    # -------------------------------------------------------------------------

    def _invalidated_keys(self) -> List[tuple]:
        return [
            ("/api/tickets",),
            ("/api/admin/all-tickets",),
            ("/api/showtimes",),
            ("/api/movies", self.showtime.movie_id, "showtimes"),
        ]

    def submit(self, form) -> BookingResult:
        """POST the booking for the selected seats."""
        self._require_login()
        form = validate_form(BookingForm, form)
        if not self.selected_seats:
            raise BookingError("no seats selected", messages.failure("Vui lòng chọn ít nhất một ghế.", title=messages.BOOKING_FAILED_TITLE))

        booking = BookingData(
            showtime_id=self.showtime.id,
            seats=self.selected_seats,
            total_price=amount_text(self.final_price),
            payment_method=form.payment_method,
            customer_info=CustomerInfo(**form.customer_info()),
        )

        try:
            data = self.api.post("/api/bookings", booking.to_api())
        except ApiError as e:
            logger.warning(f"Booking failed for showtime {self.showtime.id}: {e}")
            raise BookingError(
                str(e),
                messages.failure(messages.booking_error_message(e), title=messages.BOOKING_FAILED_TITLE),
            ) from e

        logger.info(f"Booked {', '.join(self.selected_seats)} for showtime {self.showtime.id}")
        self._invalidate(self._invalidated_keys())
        self.reset()

        ticket = None
        if isinstance(data, dict) and "id" in data:
            try:
                ticket = parse_response(Ticket, data)
            except ApiError as e:
                # the seats are booked either way
                logger.warning(f"Booking saved but ticket not readable: {e}")
        return BookingResult(notice=messages.BOOKING_SUCCESS, ticket=ticket)

    def checkout(self, form) -> BookingResult:
        """Validate the form, apply its promo code if it has a new one, then book."""
        self._require_login()
        form = validate_form(BookingForm, form)
        if form.promo_code and form.promo_code != self.applied_promo:
            self.apply_promo(form.promo_code)
        return self.submit(form)
