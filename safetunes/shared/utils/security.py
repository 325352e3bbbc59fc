"""
Security Utilities

JWT handling for the account tokens issued by the auth service. SafeTunes
only verifies tokens; issuing them is the auth service's job, and
create_access_token exists for local tooling and tests.

Usage:
======
    from safetunes.shared.utils.security import SecurityUtils

    payload = SecurityUtils.decode_access_token(token, settings.SECRET_KEY)
    owner_id = payload["user_id"]
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt


class SecurityUtils:
    """JWT token creation and validation."""

    @staticmethod
    def create_access_token(
        data: dict,
        secret_key: str,
        expires_delta: Optional[timedelta] = None,
        algorithm: str = "HS256",
    ) -> str:
        """
        Create a signed JWT.

        Args:
            data: Payload data to encode (e.g., user_id)
            secret_key: Secret key for signing
            expires_delta: Token lifetime (default: 7 days)
            algorithm: JWT algorithm (default: HS256)

        Returns:
            Encoded JWT token string
        """
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=7))
        to_encode.update({"exp": expire, "iat": datetime.now(timezone.utc)})
        return jwt.encode(to_encode, secret_key, algorithm=algorithm)

    @staticmethod
    def decode_access_token(
        token: str,
        secret_key: str,
        algorithm: str = "HS256",
    ) -> dict:
        """
        Decode and verify a JWT.

        Raises:
            ValueError: If the token is expired or invalid
        """
        try:
            return jwt.decode(token, secret_key, algorithms=[algorithm])
        except jwt.ExpiredSignatureError as e:
            raise ValueError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise ValueError(f"Invalid token: {e}") from e
