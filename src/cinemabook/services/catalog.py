"""Catalog browsing: movies, showtimes, cinemas, rooms, promotions."""

from typing import List, Optional

from cinemabook.models import Cinema, Movie, Promotion, Review, Room, Showtime
from cinemabook.services.base import BaseService

ALL = "all"


class CatalogService(BaseService):

    def movies(self) -> List[Movie]:
        return self._query_list(Movie, "/api/movies")

    def movie(self, movie_id: int) -> Optional[Movie]:
        return self._query_one(Movie, "/api/movies", movie_id)

    def movie_showtimes(self, movie_id: int) -> List[Showtime]:
        return self._query_list(Showtime, "/api/movies", movie_id, "showtimes")

    def movie_reviews(self, movie_id: int) -> List[Review]:
        return self._query_list(Review, "/api/movies", movie_id, "reviews")

    def showtime(self, showtime_id: int) -> Optional[Showtime]:
        for showtime in self.showtimes():
            if showtime.id == showtime_id:
                return showtime
        return None

    def showtimes(self) -> List[Showtime]:
        return self._query_list(Showtime, "/api/showtimes")

    def cinemas(self) -> List[Cinema]:
        return self._query_list(Cinema, "/api/cinemas")

    def rooms(self) -> List[Room]:
        return self._query_list(Room, "/api/rooms")

    def active_promotions(self) -> List[Promotion]:
        return self._query_list(Promotion, "/api/promotions/active")

    def now_showing(self, genre: Optional[str] = None) -> List[Movie]:
        """Active movies, optionally narrowed to one genre ("all" = no filter)."""
        movies = [m for m in self.movies() if m.is_showing]
        if genre and genre != ALL:
            movies = [m for m in movies if m.genre == genre]
        return movies

    def coming_soon(self) -> List[Movie]:
        return [m for m in self.movies() if m.is_coming_soon]

    def genres(self) -> List[str]:
        seen = []
        for movie in self.movies():
            if movie.genre not in seen:
                seen.append(movie.genre)
        return seen

    def cinema_rooms(self, cinema_id: int) -> List[Room]:
        return [r for r in self.rooms() if r.cinema_id == cinema_id]

    def trailer_url(self, movie_id: int) -> Optional[str]:
        for movie in self.movies():
            if movie.id == movie_id:
                return movie.trailer_url or None
        return None
