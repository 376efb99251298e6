import re

from django.conf import settings
from django.contrib.auth.views import redirect_to_login
from django.http import JsonResponse


class LoginRequiredMiddleware:
    """Require a logged-in user outside ``LOGIN_EXEMPT_URLS``.

    Browsers are sent to the login page; clients asking for JSON get a 401.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.exempt_urls = [re.compile(expr) for expr in getattr(settings, "LOGIN_EXEMPT_URLS", [])]

    def _is_exempt(self, request) -> bool:
        path = request.path_info.lstrip("/")
        return any(pattern.match(path) for pattern in self.exempt_urls)

    def __call__(self, request):
        if request.user.is_authenticated or self._is_exempt(request):
            return self.get_response(request)
        if "application/json" in request.headers.get("Accept", ""):
            return JsonResponse(
                {"detail": "Authentication credentials were not provided.", "status_code": 401},
                status=401,
            )
        return redirect_to_login(request.get_full_path(), settings.LOGIN_URL)
