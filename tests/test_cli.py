from cinemabook.cli import main

from conftest import MOVIES, SHOWTIME


def test_movies_command(app, session, capsys):
    session.add("GET", "/api/movies", body=MOVIES)
    assert main(["movies", "--genre", "Tâm lý"], app=app) == 0
    out = capsys.readouterr().out
    assert "Lật Mặt 7" in out
    assert "Bố Già" in out
    assert "Mai" not in out.split("Thể loại")[0]
    assert session.closed


def test_book_command(logged_in, session, capsys):
    session.add("GET", "/api/showtimes", body=[SHOWTIME])
    session.add("POST", "/api/promotions/validate", body={"code": "SUMMER10", "discount": 17000})
    session.add("POST", "/api/bookings", 201, {"id": 9, "bookingCode": "CB-0009"})

    code = main([
        "book", "12", "--seats", "A1", "A2",
        "--name", "Nguyễn An", "--phone", "0912345678", "--email", "an@gmail.com",
        "--payment", "momo", "--promo", "SUMMER10",
    ], app=logged_in)

    out = capsys.readouterr().out
    assert code == 0
    assert "Đặt vé thành công!" in out
    assert "CB-0009" in out
    assert "153.000 ₫" in out
    assert session.calls[-1]["json"]["totalPrice"] == "153000"


def test_book_command_seat_conflict(logged_in, session, capsys):
    session.add("GET", "/api/showtimes", body=[SHOWTIME])
    session.add("POST", "/api/bookings", 409, {"message": "Seat A1 already booked"})

    code = main([
        "book", "12", "--seats", "A1",
        "--name", "Nguyễn An", "--phone", "0912345678", "--email", "an@gmail.com",
    ], app=logged_in)

    out = capsys.readouterr().out
    assert code == 1
    assert "Một số ghế đã được đặt trước" in out


def test_book_command_bad_phone(logged_in, session, capsys):
    session.add("GET", "/api/showtimes", body=[SHOWTIME])
    code = main([
        "book", "12", "--seats", "A1",
        "--name", "Nguyễn An", "--phone", "123", "--email", "an@gmail.com",
    ], app=logged_in)
    assert code == 1
    assert "customer_phone: Số điện thoại phải có 10 chữ số" in capsys.readouterr().out
    assert session.paths("POST") == []


def test_admin_command_rejected_for_customer(logged_in, capsys):
    assert main(["admin", "stats"], app=logged_in) == 1
    assert "Không có quyền" in capsys.readouterr().out


def test_login_command(app, session, capsys):
    session.add("POST", "/api/auth/login", body={
        "token": "tok-9",
        "user": {"id": 1, "username": "nguyenan", "email": "an@gmail.com", "fullName": "Nguyễn An", "role": "user"},
    })
    assert main(["login", "--email", "an@gmail.com", "--password", "secret1"], app=app) == 0
    assert "Chào mừng Nguyễn An!" in capsys.readouterr().out
    assert app.auth.token == "tok-9"


def test_movie_command_shows_reviews(app, session, capsys):
    session.add("GET", "/api/movies/1", body={**MOVIES[0], "averageRating": 4.25, "reviewCount": 2})
    session.add("GET", "/api/movies/1/showtimes", body=[])
    session.add("GET", "/api/movies/1/reviews", body=[
        {"id": 1, "movieId": 1, "rating": 5, "comment": "Xúc động"},
        {"id": 2, "movieId": 1, "rating": 3},
    ])

    assert main(["movie", "1"], app=app) == 0

    out = capsys.readouterr().out
    assert "(4.3/5 - 2 đánh giá)" in out
    assert "Hiện tại phim này chưa có lịch chiếu" in out
    assert "Đánh giá (2):" in out
    assert "★★★★★ Xúc động" in out
    assert "★★★☆☆" in out


def test_malformed_server_data_prints_notice(app, session, capsys):
    session.add("GET", "/api/movies/1", body=MOVIES[0])
    session.add("GET", "/api/movies/1/showtimes", body=[])
    session.add("GET", "/api/movies/1/reviews", body=[{"id": 1, "movieId": 1, "rating": 9}])

    assert main(["movie", "1"], app=app) == 1
    assert "❌ Lỗi: Invalid Review data from server" in capsys.readouterr().out
