from collections.abc import Callable, Collection
from functools import wraps
from typing import ParamSpec, TypeVar

from django.http import HttpRequest, HttpResponse, JsonResponse

from core.models import User

ROLE_ADMIN = User.Role.admin
ROLE_STAFF = User.Role.staff

# Admins may do anything staff can do.
STAFF_ROLES: frozenset[str] = frozenset({ROLE_ADMIN, ROLE_STAFF})
ADMIN_ROLES: frozenset[str] = frozenset({ROLE_ADMIN})


P = ParamSpec("P")
R = TypeVar("R", bound=HttpResponse)


def json_role_required(roles: Collection[str]) -> Callable[[Callable[P, R]], Callable[P, HttpResponse]]:
    """Decorator for JSON endpoints restricted to one or more user roles.

    Anonymous callers get a JSON 401 and authenticated callers with the
    wrong role a JSON 403, instead of a login redirect.
    """

    allowed_roles = frozenset(roles)
    if not allowed_roles:
        raise ValueError("roles must not be empty")

    def decorator(view_func: Callable[P, R]) -> Callable[P, HttpResponse]:
        @wraps(view_func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> HttpResponse:
            request = args[0] if args else None
            if not isinstance(request, HttpRequest):
                return JsonResponse({"error": "Permission denied."}, status=403)

            user = getattr(request, "user", None)
            if user is None or not user.is_authenticated:
                return JsonResponse({"error": "Authentication required."}, status=401)

            if getattr(user, "role", None) not in allowed_roles and not user.is_superuser:
                return JsonResponse({"error": "Permission denied."}, status=403)

            return view_func(*args, **kwargs)

        return wrapper

    return decorator


def json_staff_required(view_func: Callable[P, R]) -> Callable[P, HttpResponse]:
    return json_role_required(STAFF_ROLES)(view_func)


def json_admin_required(view_func: Callable[P, R]) -> Callable[P, HttpResponse]:
    return json_role_required(ADMIN_ROLES)(view_func)
