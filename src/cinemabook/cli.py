#!/usr/bin/env python3
"""
CinemaBook command line
=======================

Browse the catalog, book seats and run the back-office from a terminal.

Usage:
    cinemabook movies --genre "Hành động"
    cinemabook movie 3
    cinemabook login --email an@gmail.com
    cinemabook book 12 --seats A1 A2 --name "Nguyễn An" --phone 0912345678 --email an@gmail.com --promo SUMMER10
    cinemabook admin stats
    cinemabook admin tickets --csv tickets.csv
"""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from cinemabook import messages
from cinemabook.client import CinemaBook
from cinemabook.config import API_URL, setup_logging
from cinemabook.errors import CinemaBookError, FormError
from cinemabook.forms import PAYMENT_METHODS, USER_ROLES
from cinemabook.models import Movie

logger = logging.getLogger(__name__)


# =============================================================================
# CATALOG
# =============================================================================

def _movie_line(movie: Movie) -> str:
    rating = f"{messages.format_rating(movie.average_rating)}/5" if movie.average_rating else "Chưa có đánh giá"
    return f"  [{movie.id:>3}] {movie.title} | {movie.genre} | {movie.duration} phút | {movie.age_rating} | {rating}"


def cmd_movies(app: CinemaBook, args) -> int:
    movies = app.catalog.now_showing(args.genre)
    print(f"\n🎬 Phim đang chiếu ({len(movies)})")
    for movie in movies:
        print(_movie_line(movie))
    genres = app.catalog.genres()
    if genres:
        print(f"\n   Thể loại: {', '.join(genres)}")
    return 0


def cmd_coming_soon(app: CinemaBook, args) -> int:
    movies = app.catalog.coming_soon()
    print(f"\n🍿 Phim sắp chiếu ({len(movies)})")
    for movie in movies:
        print(f"  [{movie.id:>3}] {movie.title} | Khởi chiếu: {messages.format_date(movie.release_date)}")
    return 0


def cmd_movie(app: CinemaBook, args) -> int:
    movie = app.catalog.movie(args.movie_id)
    if movie is None:
        print("❌ Không tìm thấy phim")
        return 1
    print(f"\n🎬 {movie.title} ({movie.age_rating})")
    print(f"   {movie.genre} • {movie.duration} phút")
    print(f"   {messages.stars(movie.average_rating)} "
          f"({messages.format_rating(movie.average_rating)}/5 - {movie.review_count or 0} đánh giá)")
    if movie.director:
        print(f"   Đạo diễn: {movie.director}")
    if movie.actors:
        print(f"   Diễn viên: {', '.join(movie.actors)}")
    if movie.description:
        print(f"\n   {movie.description}")

    showtimes = app.catalog.movie_showtimes(movie.id)
    if showtimes:
        print("\n   Lịch chiếu:")
        for st in showtimes:
            room = st.room
            place = f"{room.cinema.name} - {room.name}" if room and room.cinema else (room.name if room else "")
            print(f"   [{st.id:>3}] {messages.format_datetime(st.start_time)} | {place} | "
                  f"{messages.format_price(st.unit_price)} | {len(st.available_seats)} ghế trống")
    else:
        print("\n   Hiện tại phim này chưa có lịch chiếu")

    reviews = app.catalog.movie_reviews(movie.id)
    print(f"\n   Đánh giá ({len(reviews)}):")
    if not reviews:
        print("   Chưa có đánh giá nào")
    for review in reviews:
        print(f"   {messages.stars(review.rating)} {review.comment or ''}".rstrip())
    return 0


def cmd_cinemas(app: CinemaBook, args) -> int:
    cinemas = app.catalog.cinemas()
    print(f"\n🏢 Hệ thống rạp ({len(cinemas)})")
    for cinema in cinemas:
        rooms = app.catalog.cinema_rooms(cinema.id)
        print(f"  {cinema.name} | {cinema.address} | {cinema.phone or ''} | {len(rooms)} phòng chiếu")
        for room in rooms:
            print(f"     - {room.name} ({room.seat_count} chỗ)")
    return 0


def cmd_promotions(app: CinemaBook, args) -> int:
    promotions = app.catalog.active_promotions()
    print(f"\n🎁 Khuyến mãi ({len(promotions)})")
    for promo in promotions:
        print(f"  {promo.code} | {promo.title} | -{promo.discount_value:g}% | Đến: {messages.format_date(promo.end_date)}")
    return 0


# =============================================================================
# ACCOUNTS
# =============================================================================

def cmd_login(app: CinemaBook, args) -> int:
    password = args.password or getpass.getpass("Mật khẩu: ")
    print(app.accounts.login({"email": args.email, "password": password}))
    return 0


def cmd_register(app: CinemaBook, args) -> int:
    password = args.password or getpass.getpass("Mật khẩu: ")
    confirm = args.password or getpass.getpass("Xác nhận mật khẩu: ")
    print(app.accounts.register({
        "username": args.username,
        "email": args.email,
        "password": password,
        "confirm_password": confirm,
        "full_name": args.full_name,
        "phone": args.phone,
    }))
    return 0


def cmd_logout(app: CinemaBook, args) -> int:
    app.accounts.logout()
    print("👋 Đã đăng xuất")
    return 0


def cmd_whoami(app: CinemaBook, args) -> int:
    user = app.accounts.current_user()
    if user is None:
        print("Chưa đăng nhập")
        return 1
    print(f"{user.full_name} <{user.email}> @{user.username} ({user.role})")
    return 0


def cmd_tickets(app: CinemaBook, args) -> int:
    tickets = app.accounts.my_tickets()
    print(f"\n🎟️  Vé của tôi ({len(tickets)})")
    for t in tickets:
        title = t.movie.title if t.movie else messages.MISSING
        print(f"  {t.booking_code} | {title} | {', '.join(t.seats)} | {messages.format_price(t.total_price)}")
    return 0


# =============================================================================
# BOOKING
# =============================================================================

def cmd_book(app: CinemaBook, args) -> int:
    flow = app.booking_for(args.showtime_id)
    flow.select_seats(args.seats)
    print(f"\n🪑 Ghế: {', '.join(flow.selected_seats)}")
    print(f"   Tạm tính: {messages.format_price(flow.total_price)}")

    form = {
        "customer_name": args.name,
        "customer_phone": args.phone,
        "customer_email": args.email,
        "payment_method": args.payment,
        "promo_code": args.promo,
    }
    if args.promo:
        print(flow.apply_promo(args.promo))
        print(f"   Giảm giá ({flow.applied_promo}): -{messages.format_price(flow.promo_discount)}")
        print(f"   Tổng cộng: {messages.format_price(flow.final_price)}")

    result = flow.submit(form)
    print(result.notice)
    if result.ticket and result.ticket.booking_code:
        print(f"   Mã vé: {result.ticket.booking_code}")
    return 0


# =============================================================================
# ADMIN
# =============================================================================

def cmd_admin_stats(app: CinemaBook, args) -> int:
    stats = app.admin.stats()
    print(f"\n{'='*50}")
    print("📊 THỐNG KÊ")
    print(f"{'='*50}")
    print(f"   Phim:        {stats.total_movies}")
    print(f"   Rạp:         {stats.total_cinemas}")
    print(f"   Vé đã bán:   {stats.total_tickets}")
    print(f"   Doanh thu:   {messages.format_price(stats.total_revenue)}")
    print(f"   Đánh giá:    {stats.total_reviews} (TB {stats.avg_rating})")
    print(f"{'='*50}\n")
    return 0


def cmd_admin_tickets(app: CinemaBook, args) -> int:
    tickets = app.admin.tickets.list()
    if not tickets:
        print("Chưa có vé nào được đặt")
        return 0
    for t in tickets:
        print(f"  {t.booking_code} | {t.customer_info.name if t.customer_info else messages.MISSING} | "
              f"{', '.join(t.seats)} | {messages.format_number(t.total_price)}đ | {app.admin.tickets.status_label(t)}")
    if args.csv:
        path = app.admin.tickets.to_csv(tickets, args.csv)
        print(f"✅ Saved {len(tickets)} tickets to {path}")
    return 0


def cmd_admin_showtimes(app: CinemaBook, args) -> int:
    for showtime, occupancy in app.admin.showtime_occupancy():
        print(f"  [{showtime.id:>3}] {messages.format_datetime(showtime.start_time)} | "
              f"{occupancy.badge} | {occupancy.label}")
    return 0


def cmd_admin_users(app: CinemaBook, args) -> int:
    for user in app.admin.users.list():
        print(f"  [{user.id:>3}] {user.full_name} <{user.email}> @{user.username} ({user.role})")
    return 0


def cmd_admin_set_role(app: CinemaBook, args) -> int:
    print(app.admin.users.update_role(args.user_id, args.role))
    return 0


def cmd_admin_delete_user(app: CinemaBook, args) -> int:
    print(app.admin.users.delete(args.user_id))
    return 0


def cmd_admin_delete_movie(app: CinemaBook, args) -> int:
    print(app.admin.movies.delete(args.movie_id))
    return 0


def cmd_admin_delete_cinema(app: CinemaBook, args) -> int:
    print(app.admin.cinemas.delete(args.cinema_id))
    return 0


def cmd_admin_delete_showtime(app: CinemaBook, args) -> int:
    print(app.admin.showtimes.delete(args.showtime_id))
    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cinemabook", description="CinemaBook movie ticket client")
    parser.add_argument('--api-url', type=str, default=API_URL, help='Booking API base URL')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("movies", help="Movies now showing")
    p.add_argument('--genre', type=str, default=None, help='Only this genre')
    p.set_defaults(func=cmd_movies)

    sub.add_parser("coming-soon", help="Upcoming movies").set_defaults(func=cmd_coming_soon)

    p = sub.add_parser("movie", help="Movie details and showtimes")
    p.add_argument('movie_id', type=int)
    p.set_defaults(func=cmd_movie)

    sub.add_parser("cinemas", help="Cinemas and their rooms").set_defaults(func=cmd_cinemas)
    sub.add_parser("promotions", help="Active promotions").set_defaults(func=cmd_promotions)

    p = sub.add_parser("login", help="Sign in")
    p.add_argument('--email', type=str, required=True)
    p.add_argument('--password', type=str, default=None, help='Prompted when omitted')
    p.set_defaults(func=cmd_login)

    p = sub.add_parser("register", help="Create an account")
    p.add_argument('--username', type=str, required=True)
    p.add_argument('--email', type=str, required=True)
    p.add_argument('--full-name', type=str, required=True)
    p.add_argument('--phone', type=str, default=None)
    p.add_argument('--password', type=str, default=None, help='Prompted (twice) when omitted')
    p.set_defaults(func=cmd_register)

    sub.add_parser("logout", help="Sign out").set_defaults(func=cmd_logout)
    sub.add_parser("whoami", help="Current user").set_defaults(func=cmd_whoami)
    sub.add_parser("tickets", help="My tickets").set_defaults(func=cmd_tickets)

    p = sub.add_parser("book", help="Book seats for a showtime")
    p.add_argument('showtime_id', type=int)
    p.add_argument('--seats', nargs='+', required=True, help='Seat codes, e.g. A1 A2')
    p.add_argument('--name', type=str, required=True)
    p.add_argument('--phone', type=str, required=True)
    p.add_argument('--email', type=str, required=True)
    p.add_argument('--payment', choices=PAYMENT_METHODS, default="cash")
    p.add_argument('--promo', type=str, default=None)
    p.set_defaults(func=cmd_book)

    admin = sub.add_parser("admin", help="Back-office (admin role)")
    admin_sub = admin.add_subparsers(dest="admin_command", required=True)
    admin_sub.add_parser("stats", help="Dashboard numbers").set_defaults(func=cmd_admin_stats)

    p = admin_sub.add_parser("tickets", help="All tickets")
    p.add_argument('--csv', type=str, default=None, help='Also export to this CSV file')
    p.set_defaults(func=cmd_admin_tickets)

    admin_sub.add_parser("showtimes", help="Showtimes with seat occupancy").set_defaults(func=cmd_admin_showtimes)
    admin_sub.add_parser("users", help="All users").set_defaults(func=cmd_admin_users)

    p = admin_sub.add_parser("set-role", help="Change a user's role")
    p.add_argument('user_id', type=int)
    p.add_argument('role', choices=USER_ROLES)
    p.set_defaults(func=cmd_admin_set_role)

    for name, dest, func in [
        ("delete-user", "user_id", cmd_admin_delete_user),
        ("delete-movie", "movie_id", cmd_admin_delete_movie),
        ("delete-cinema", "cinema_id", cmd_admin_delete_cinema),
        ("delete-showtime", "showtime_id", cmd_admin_delete_showtime),
    ]:
        p = admin_sub.add_parser(name)
        p.add_argument(dest, type=int)
        p.set_defaults(func=func)

    return parser


def main(argv: Optional[List[str]] = None, app: Optional[CinemaBook] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    app = app or CinemaBook(api_url=args.api_url)
    try:
        return args.func(app, args)
    except FormError as e:
        for field, message in e.errors.items():
            print(f"❌ {field}: {message}")
        return 1
    except CinemaBookError as e:
        logger.debug(f"{type(e).__name__}: {e}")
        print(e.notice)
        return 1
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())
