# shared/common/authentication.py
"""
JWT Authentication for player-facing APIs
"""

import jwt
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple
from django.conf import settings
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)


class JWTAuthentication(authentication.BaseAuthentication):
    """
    Bearer token authentication.
    The token's `sub` claim is the player's user id.
    """

    keyword = 'Bearer'

    def authenticate(self, request: Request) -> Optional[Tuple[Any, Dict]]:
        auth_header = authentication.get_authorization_header(request)

        if not auth_header:
            return None

        try:
            auth_parts = auth_header.decode('utf-8').split()
        except UnicodeDecodeError:
            raise exceptions.AuthenticationFailed('Invalid token header encoding')

        if len(auth_parts) != 2:
            raise exceptions.AuthenticationFailed('Invalid token header format')

        if auth_parts[0].lower() != self.keyword.lower():
            return None

        return self.authenticate_token(auth_parts[1])

    def authenticate_token(self, token: str) -> Tuple[Any, Dict]:
        """Validate and decode JWT token"""
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SETTINGS['VERIFYING_KEY'],
                algorithms=[settings.JWT_SETTINGS['ALGORITHM']],
                issuer=settings.JWT_SETTINGS['ISSUER'],
                options={'require': ['exp', 'iat', 'sub', 'iss']}
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            raise exceptions.AuthenticationFailed('Invalid token')

        return (TokenUser(payload), payload)

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class TokenUser:
    """
    User object created from JWT token payload.
    """

    def __init__(self, payload: Dict):
        self.payload = payload
        self.id = payload.get('sub')
        self.username = payload.get('username')
        self.is_active = True
        self.is_authenticated = True
        self.is_anonymous = False

    def __str__(self) -> str:
        return f"TokenUser({self.id})"


def generate_access_token(user_id: str, username: str = '', extra_claims: Dict = None) -> str:
    """Issue an access token for a player. Used by the auth service and tests."""
    now = datetime.now(timezone.utc)

    payload = {
        'sub': str(user_id),
        'username': username,
        'iat': now,
        'exp': now + settings.JWT_SETTINGS['ACCESS_TOKEN_LIFETIME'],
        'iss': settings.JWT_SETTINGS['ISSUER'],
        'type': 'access',
    }

    if extra_claims:
        payload.update(extra_claims)

    return jwt.encode(
        payload,
        settings.JWT_SETTINGS['SIGNING_KEY'],
        algorithm=settings.JWT_SETTINGS['ALGORITHM']
    )
