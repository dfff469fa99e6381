import pytest

from cinemabook import messages
from cinemabook.errors import AuthRequired, BookingError, FormError, PromoError
from cinemabook.models import Showtime
from cinemabook.services.booking import amount_text

from conftest import SHOWTIME

FORM = {
    "customer_name": "Nguyễn An",
    "customer_phone": "0912345678",
    "customer_email": "an@gmail.com",
    "payment_method": "card",
}


@pytest.fixture
def flow(logged_in):
    return logged_in.booking(Showtime.model_validate(SHOWTIME))


def test_amount_text():
    assert amount_text(135000) == "135000"
    assert amount_text(135000.0) == "135000"
    assert amount_text(1.5) == "1.5"


def test_select_seats_and_total(flow):
    assert flow.select_seats(["a1", "A2", "A1", " "]) == ["A1", "A2"]
    assert flow.total_price == 170000
    assert flow.final_price == 170000


def test_select_unavailable_seat(flow):
    with pytest.raises(BookingError) as exc:
        flow.select_seats(["A1", "C9"])
    assert exc.value.notice.description == messages.SEATS_NOT_AVAILABLE
    assert flow.selected_seats == []


def test_select_nothing(flow):
    with pytest.raises(BookingError):
        flow.select_seats([])


def test_apply_promo(flow, session):
    session.add("POST", "/api/promotions/validate", body={"code": "SUMMER10", "discount": 17000})
    flow.select_seats(["A1", "A2"])

    notice = flow.apply_promo(" SUMMER10 ")

    assert session.calls[-1]["json"] == {"code": "SUMMER10", "totalPrice": 170000}
    assert notice.title == messages.PROMO_APPLIED_TITLE
    assert notice.description == "Bạn được giảm 17.000 ₫"
    assert flow.applied_promo == "SUMMER10"
    assert flow.final_price == 153000


def test_blank_promo_is_a_no_op(flow, session):
    assert flow.apply_promo("  ") is None
    assert session.calls == []


def test_rejected_promo_keeps_previous_discount(flow, session):
    session.add("POST", "/api/promotions/validate", body={"code": "OLD", "discount": 5000})
    session.add("POST", "/api/promotions/validate", 400, {"message": "Invalid promotion code"})
    flow.select_seats(["A1"])
    flow.apply_promo("OLD")

    with pytest.raises(PromoError) as exc:
        flow.apply_promo("BOGUS")

    assert exc.value.notice == messages.PROMO_INVALID
    assert flow.promo_discount == 5000
    assert flow.applied_promo == "OLD"


def test_submit_posts_booking_and_invalidates(flow, logged_in, session):
    cache = logged_in.cache
    for key in [("/api/tickets",), ("/api/admin/all-tickets",), ("/api/showtimes",),
                ("/api/movies", 1, "showtimes"), ("/api/movies",), ("/api/cinemas",)]:
        cache.set(key, [])
    session.add("POST", "/api/promotions/validate", body={"code": "SUMMER10", "discount": 17000})
    session.add("POST", "/api/bookings", 201, {"id": 77, "bookingCode": "CB-0077", "seats": ["A1", "A2"],
                                               "totalPrice": "153000", "status": "confirmed"})

    flow.select_seats(["A1", "A2"])
    flow.apply_promo("SUMMER10")
    result = flow.submit(FORM)

    body = session.calls[-1]["json"]
    assert session.calls[-1]["path"] == "/api/bookings"
    assert body == {
        "showtimeId": 12,
        "seats": ["A1", "A2"],
        "totalPrice": "153000",
        "paymentMethod": "card",
        "customerInfo": {"name": "Nguyễn An", "phone": "0912345678", "email": "an@gmail.com"},
    }
    assert session.calls[-1]["headers"]["Authorization"] == "Bearer tok-123"
    assert result.notice == messages.BOOKING_SUCCESS
    assert result.ticket.booking_code == "CB-0077"

    assert ("/api/tickets",) not in cache
    assert ("/api/admin/all-tickets",) not in cache
    assert ("/api/showtimes",) not in cache
    assert ("/api/movies", 1, "showtimes") not in cache
    assert ("/api/movies",) in cache
    assert ("/api/cinemas",) in cache

    assert flow.selected_seats == []
    assert flow.promo_discount == 0


@pytest.mark.parametrize("server_text, expected", [
    ("Seats A1 already booked", messages.SEATS_ALREADY_BOOKED),
    ("Seat A1 not available", messages.SEATS_NOT_AVAILABLE),
    ("database exploded", messages.BOOKING_FAILED),
])
def test_submit_failure_is_translated(flow, logged_in, session, server_text, expected):
    logged_in.cache.set(("/api/showtimes",), [])
    session.add("POST", "/api/bookings", 409, {"message": server_text})
    flow.select_seats(["A1"])

    with pytest.raises(BookingError) as exc:
        flow.submit(FORM)

    assert exc.value.notice.title == messages.BOOKING_FAILED_TITLE
    assert exc.value.notice.description == expected
    assert exc.value.notice.is_error
    # nothing invalidated, selection kept for a manual retry
    assert ("/api/showtimes",) in logged_in.cache
    assert flow.selected_seats == ["A1"]
    assert len(session.paths("POST")) == 1


def test_submit_validates_form_before_calling_api(flow, session):
    flow.select_seats(["A1"])
    with pytest.raises(FormError) as exc:
        flow.submit({**FORM, "customer_phone": "12345"})
    assert "customer_phone" in exc.value.errors
    assert session.calls == []


def test_submit_requires_login(app, session):
    flow = app.booking(Showtime.model_validate(SHOWTIME))
    flow.select_seats(["A1"])
    with pytest.raises(AuthRequired) as exc:
        flow.submit(FORM)
    assert exc.value.notice == messages.LOGIN_TO_BOOK
    assert session.calls == []


def test_checkout_validates_promo_then_books(flow, session):
    session.add("POST", "/api/promotions/validate", body={"code": "SUMMER10", "discount": 8500})
    session.add("POST", "/api/bookings", 201, {"id": 1, "bookingCode": "CB-1"})
    flow.select_seats(["A1"])

    flow.checkout({**FORM, "promo_code": "SUMMER10"})

    assert session.paths() == ["/api/promotions/validate", "/api/bookings"]
    assert session.calls[1]["json"]["totalPrice"] == "76500"


def test_checkout_stops_when_promo_rejected(flow, session):
    session.add("POST", "/api/promotions/validate", 404, {"message": "Promotion not found"})
    flow.select_seats(["A1"])
    with pytest.raises(PromoError):
        flow.checkout({**FORM, "promo_code": "NOPE"})
    assert session.paths() == ["/api/promotions/validate"]


def test_checkout_skips_promo_already_applied(flow, session):
    session.add("POST", "/api/promotions/validate", body={"code": "SUMMER10", "discount": 8500})
    session.add("POST", "/api/bookings", 201, {"id": 1})
    flow.select_seats(["A1"])
    flow.apply_promo("SUMMER10")

    flow.checkout({**FORM, "promo_code": "SUMMER10"})

    assert session.paths() == ["/api/promotions/validate", "/api/bookings"]


def test_booking_for_unknown_showtime(app, session):
    session.add("GET", "/api/showtimes", body=[SHOWTIME])
    assert app.booking_for(12).showtime.id == 12
    with pytest.raises(BookingError):
        app.booking_for(999)
