import hmac
import logging

from django.conf import settings
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import BasePermission
from rest_framework_simplejwt.authentication import JWTAuthentication

logger = logging.getLogger(__name__)


class AuthlessUser:
    is_authenticated = True


def has_role(request, *roles):
    return bool(request.auth) and request.auth.get("role") in roles


class IsDeveloper(BasePermission):
    def has_permission(self, request, view):
        return has_role(request, "DEVELOPER")


class IsAdmin(BasePermission):
    def has_permission(self, request, view):
        return has_role(request, "ADMIN")


class IsAdminOrDeveloper(BasePermission):
    def has_permission(self, request, view):
        return has_role(request, "ADMIN", "DEVELOPER")


class IsParentOrStudent(BasePermission):
    def has_permission(self, request, view):
        return has_role(request, "PARENT", "STUDENT")


class CustomJWTAuthentication(JWTAuthentication):
    def get_user(self, validated_token):
        return AuthlessUser()

    def authenticate(self, request):
        header = self.get_header(request)
        if header is None:
            return None
        raw_token = self.get_raw_token(header)
        if raw_token is None:
            return None
        validated_token = self.get_validated_token(raw_token)
        return (AuthlessUser(), validated_token)


class SharedSecretAuthentication(BaseAuthentication):
    """
    Authenticates scheduler calls against a secret from settings.

    Subclasses name the settings attribute holding the secret and extract the
    presented value from the request.
    """
    setting_name = None
    www_authenticate = None

    def get_presented_secret(self, request):
        raise NotImplementedError

    def authenticate(self, request):
        expected = getattr(settings, self.setting_name, None)
        presented = self.get_presented_secret(request)

        if not expected or not presented or not hmac.compare_digest(str(presented).encode(), str(expected).encode()):
            logger.warning(f"Rejected cron call to {request.path}: bad or missing {self.setting_name}")
            raise AuthenticationFailed("Unauthorized")

        return (AuthlessUser(), None)

    def authenticate_header(self, request):
        return self.www_authenticate


class CronSecretAuthentication(SharedSecretAuthentication):
    """`Authorization: Bearer <CRON_SECRET>`"""
    setting_name = "CRON_SECRET"
    www_authenticate = 'Bearer realm="cron"'

    def get_presented_secret(self, request):
        header = request.META.get("HTTP_AUTHORIZATION", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer":
            return None
        return token.strip()


class CronApiKeyAuthentication(SharedSecretAuthentication):
    """`x-api-key: <CRON_API_KEY>`"""
    setting_name = "CRON_API_KEY"
    www_authenticate = 'Api-Key realm="cron"'

    def get_presented_secret(self, request):
        return request.META.get("HTTP_X_API_KEY")
