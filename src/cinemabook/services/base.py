"""Base service: shared API client, query cache and session store."""

import logging
from typing import Any, Iterable, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from cinemabook.api import ApiClient
from cinemabook.auth import AuthStore
from cinemabook.cache import QueryCache
from cinemabook.errors import ApiError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def parse_response(model: Type[M], data: Any) -> M:
    """Validate a response body; a malformed one is reported as ``ApiError``."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"Malformed {model.__name__} in response: {e.error_count()} error(s)")
        raise ApiError(None, f"Invalid {model.__name__} data from server: {e.errors()[0]['msg']}") from e


class BaseService:
    """Reads go through the cache; writes go straight to the API and then
    invalidate the keys they touched."""

    def __init__(self, api: ApiClient, cache: QueryCache, auth: AuthStore):
        self.api = api
        self.cache = cache
        self.auth = auth

    def _query(self, *key: Any, on_401: str = "throw") -> Any:
        return self.cache.fetch(key, lambda: self.api.get_json(key, on_401=on_401))

    def _query_list(self, model: Type[M], *key: Any) -> List[M]:
        data = self._query(*key) or []
        return [parse_response(model, item) for item in data]

    def _query_one(self, model: Type[M], *key: Any) -> M | None:
        data = self._query(*key)
        return parse_response(model, data) if data else None

    def _invalidate(self, keys: Iterable[tuple]) -> None:
        for key in keys:
            self.cache.invalidate(key)
