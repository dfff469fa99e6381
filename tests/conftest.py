import json
from urllib.parse import urlparse

import pytest
import requests

from cinemabook.client import CinemaBook
from cinemabook.models import User

API_URL = "http://api.test"


def make_response(status=200, body=None, reason="OK"):
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response.encoding = "utf-8"
    if body is None:
        response._content = b""
    elif isinstance(body, (dict, list)):
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = str(body).encode("utf-8")
    return response


class FakeSession:
    """Stands in for requests.Session; answers from a route table and records calls."""

    def __init__(self):
        self.headers = {}
        self.routes = {}
        self.calls = []
        self.closed = False

    def add(self, method, path, status=200, body=None):
        self.routes.setdefault((method, path), []).append((status, body))

    def request(self, method, url, json=None, headers=None, timeout=None):
        path = urlparse(url).path
        self.calls.append({"method": method, "path": path, "json": json, "headers": headers or {}})
        answers = self.routes.get((method, path))
        if not answers:
            return make_response(404, f"no route for {method} {path}", reason="Not Found")
        status, body = answers.pop(0) if len(answers) > 1 else answers[0]
        return make_response(status, body)

    def paths(self, method=None):
        return [c["path"] for c in self.calls if method is None or c["method"] == method]

    def close(self):
        self.closed = True


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def app(session, tmp_path):
    return CinemaBook(api_url=API_URL, auth_path=tmp_path / "auth.json", session=session)


@pytest.fixture
def logged_in(app):
    app.auth.set_token("tok-123")
    app.auth.set_user(User(id=1, username="an", email="an@gmail.com", full_name="Nguyễn An", role="user"))
    return app


@pytest.fixture
def admin_app(app):
    app.auth.set_token("tok-admin")
    app.auth.set_user(User(id=9, username="admin", email="admin@gmail.com", full_name="Quản trị", role="admin"))
    return app


MOVIES = [
    {"id": 1, "title": "Lật Mặt 7", "description": "Gia đình", "genre": "Tâm lý", "duration": 138,
     "ageRating": "13+", "status": "active", "actors": ["Thanh Hiền"], "trailerUrl": "https://youtu.be/x1"},
    {"id": 2, "title": "Mai", "description": "Tình cảm", "genre": "Tình cảm", "duration": 131,
     "ageRating": "18+", "status": "active", "actors": []},
    {"id": 3, "title": "Dune: Part Three", "description": "Sci-fi", "genre": "Khoa học viễn tưởng",
     "duration": 160, "ageRating": "13+", "status": "coming-soon", "releaseDate": "2026-12-18T00:00:00Z"},
    {"id": 4, "title": "Bố Già", "description": "Hài", "genre": "Tâm lý", "duration": 128,
     "ageRating": "16+", "status": "active"},
]

SHOWTIME = {
    "id": 12, "movieId": 1, "roomId": 5,
    "startTime": "2026-10-20T19:30:00Z", "endTime": "2026-10-20T21:50:00Z",
    "price": "85000.00",
    "availableSeats": ["A1", "A2", "A3", "B1"],
    "room": {"id": 5, "cinemaId": 2, "name": "Phòng 1", "capacity": 120,
             "cinema": {"id": 2, "name": "CGV Vincom", "address": "72 Lê Thánh Tôn"}},
}
