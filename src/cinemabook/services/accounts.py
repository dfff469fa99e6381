"""Login, registration and the logged-in user's tickets."""

import logging
from typing import List, Optional

from cinemabook import messages
from cinemabook.errors import AccountError, ApiError
from cinemabook.forms import LoginForm, RegisterForm, validate_form
from cinemabook.messages import Notice
from cinemabook.models import AuthResult, Ticket, User
from cinemabook.services.base import BaseService, parse_response

logger = logging.getLogger(__name__)


class AccountService(BaseService):

    def _start_session(self, data, title: str) -> Notice:
        result = parse_response(AuthResult, data)
        self.auth.set_token(result.token)
        self.auth.set_user(result.user)
        # cached reads may have been made anonymously
        self.cache.clear()
        logger.info(f"Signed in as {result.user.email or result.user.username}")
        return messages.success(messages.welcome(result.user.full_name), title=title)

    def login(self, form) -> Notice:
        form = validate_form(LoginForm, form)
        try:
            data = self.api.post("/api/auth/login", form.to_payload())
        except ApiError as e:
            raise AccountError(str(e), messages.failure(
                messages.error_text(e, messages.LOGIN_FAILED), title=messages.LOGIN_FAILED_TITLE)) from e
        return self._start_session(data, messages.LOGIN_SUCCESS_TITLE)

    def register(self, form) -> Notice:
        form = validate_form(RegisterForm, form)
        try:
            data = self.api.post("/api/auth/register", form.to_payload())
        except ApiError as e:
            raise AccountError(str(e), messages.failure(
                messages.error_text(e, messages.REGISTER_FAILED), title=messages.REGISTER_FAILED_TITLE)) from e
        return self._start_session(data, messages.REGISTER_SUCCESS_TITLE)

    def logout(self) -> None:
        self.auth.logout()
        self.cache.clear()

    def current_user(self) -> Optional[User]:
        return self.auth.user if self.auth.is_authenticated() else None

    def my_tickets(self) -> List[Ticket]:
        self.auth.require_login()
        return self._query_list(Ticket, "/api/tickets")
