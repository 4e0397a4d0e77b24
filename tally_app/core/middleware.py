import logging

from django.contrib.auth import logout

logger = logging.getLogger(__name__)

SESSION_TOKEN_KEY = "_tally_session_token"


class SingleActiveSessionMiddleware:
    """Log out sessions that were superseded by a newer login.

    Each login rotates ``User.active_session_token`` and copies it into the
    session. A session holding an older token belongs to another device.
    """

    def __init__(self, get_response) -> None:
        self.get_response = get_response

    def __call__(self, request):
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            expected = str(getattr(user, "active_session_token", "") or "")
            presented = str(request.session.get(SESSION_TOKEN_KEY) or "")
            if expected and presented != expected:
                logger.info("Ending superseded session for %s", user.get_username())
                logout(request)

        return self.get_response(request)
