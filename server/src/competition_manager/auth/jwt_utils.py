"""JWT utilities for authentication using authlib"""

import time
from typing import Dict, Optional

from authlib.jose import JoseError, JsonWebToken
from authlib.jose.errors import InvalidTokenError

from competition_manager.auth.models import User
from competition_manager.config import config
from competition_manager.logging_config import get_logger

logger = get_logger(__name__)


class JWTUtils:
    """Signs and verifies bearer tokens with a shared secret"""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None,
    ):
        self.algorithm = algorithm or config.get("jwt_algorithm", "HS256")
        self.jwt = JsonWebToken([self.algorithm])
        self._secret = secret
        self.expire_minutes = expire_minutes or config.get("jwt_expire_minutes", 1440)

    @property
    def secret(self) -> str:
        secret = self._secret or config.get("jwt_secret")
        if not secret:
            raise InvalidTokenError(description="JWT_SECRET must be configured")
        return secret

    def create_access_token(self, user_id: str, role: str = "user") -> str:
        """
        Create a signed access token

        Args:
            user_id: Value for the 'sub' claim
            role: 'admin' or 'user'

        Returns:
            Encoded JWT string
        """
        now = int(time.time())
        payload = {
            "sub": str(user_id),
            "role": role,
            "iat": now,
            "exp": now + self.expire_minutes * 60,
        }
        token = self.jwt.encode({"alg": self.algorithm}, payload, self.secret)
        return token.decode("utf-8") if isinstance(token, bytes) else token

    def _verify_token(self, token: str) -> Dict:
        """
        Verify signature and expiry of a token

        Raises:
            InvalidTokenError: If token is invalid or expired
        """
        try:
            claims = self.jwt.decode(token, self.secret)
            claims.validate()
            return dict(claims)
        except JoseError as e:
            logger.warning(f"JWT validation failed: {e}")
            raise InvalidTokenError(description=f"Token validation failed: {e}")
        except Exception as e:
            logger.error(f"Unexpected error during token validation: {e}")
            raise InvalidTokenError(description=f"Token validation error: {e}")

    def extract_user(self, token: str) -> User:
        """
        Extract user ID and claims from a bearer token

        Raises:
            InvalidTokenError: If token is invalid or missing user ID
        """
        claims = self._verify_token(token)
        user_id = claims.get("sub")

        if not user_id:
            raise InvalidTokenError(description="Token missing 'sub' claim")

        user_claims = {
            "exp": claims.get("exp"),
            "iat": claims.get("iat"),
            "role": claims.get("role", "user"),
        }

        return User(user_id=str(user_id), claims=user_claims)


# Global JWT utilities instance
jwt_utils = JWTUtils()
