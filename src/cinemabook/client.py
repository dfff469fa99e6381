"""One object wiring the API client, cache, session store and services."""

from pathlib import Path
from typing import Optional

import requests

from cinemabook.api import ApiClient
from cinemabook.auth import AuthStore
from cinemabook.cache import QueryCache
from cinemabook.config import API_URL, AUTH_PATH
from cinemabook.errors import BookingError
from cinemabook.messages import failure
from cinemabook.models import Showtime
from cinemabook.services.accounts import AccountService
from cinemabook.services.admin import AdminService
from cinemabook.services.booking import BookingFlow
from cinemabook.services.catalog import CatalogService


class CinemaBook:
    """
    Usage:
        app = CinemaBook()
        app.accounts.login({"email": "an@gmail.com", "password": "secret1"})
        flow = app.booking(app.catalog.movie_showtimes(3)[0])
        flow.select_seats(["A1", "A2"])
        flow.checkout({...})
    """

    def __init__(self, api_url: str = API_URL, auth_path: Path = AUTH_PATH,
                 session: Optional[requests.Session] = None, stale_time: Optional[float] = None):
        self.auth = AuthStore(auth_path)
        self.api = ApiClient(api_url, token_provider=lambda: self.auth.token, session=session)
        self.cache = QueryCache(stale_time=stale_time)

        self.catalog = CatalogService(self.api, self.cache, self.auth)
        self.accounts = AccountService(self.api, self.cache, self.auth)
        self.admin = AdminService(self.api, self.cache, self.auth)

    def booking(self, showtime: Showtime) -> BookingFlow:
        return BookingFlow(self.api, self.cache, self.auth, showtime)

    def booking_for(self, showtime_id: int) -> BookingFlow:
        showtime = self.catalog.showtime(showtime_id)
        if showtime is None:
            raise BookingError(f"showtime {showtime_id} not found",
                               failure("Không tìm thấy suất chiếu.", title="Lỗi đặt vé"))
        return self.booking(showtime)

    def close(self) -> None:
        self.api.close()
