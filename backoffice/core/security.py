# =============================================================================
# BACKOFFICE SERVICE - CORE SECURITY MODULE
# =============================================================================
# File: backoffice/core/security.py
# Description: Password hashing (Argon2id / Bcrypt) and JWT issuing/validation
# =============================================================================

from typing import Literal, Optional, Tuple
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import bcrypt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import BaseModel

from backoffice.core.config import Settings
from backoffice.core.exceptions import TokenExpiredError, TokenInvalidError


TokenType = Literal["access", "refresh"]

# Bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


# =============================================================================
# PASSWORD HASHER CONFIGURATION
# =============================================================================

class PasswordManager:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    PASSWORD HASHING MANAGER                              │
    │  Implements OWASP recommended Argon2id with Bcrypt fallback            │
    │  Supports automatic algorithm upgrade on password verification         │
    └─────────────────────────────────────────────────────────────────────────┘

    Algorithm Selection:
        - Primary:  Argon2id (PASSWORD_HASH_ALGORITHM=argon2)
        - Fallback: Bcrypt (verification of existing hashes, or primary
                    when PASSWORD_HASH_ALGORITHM=bcrypt)

    Hashes are salted; verification is constant time in both libraries.
    """

    def __init__(self, settings: Settings):
        """Initialize password manager with configured algorithms."""
        self._argon2_hasher = PasswordHasher(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
            hash_len=32,
            salt_len=16,
        )
        self._bcrypt_rounds = settings.bcrypt_rounds
        self._preferred_algorithm = settings.password_hash_algorithm

    def hash_password(self, password: str) -> str:
        """
        Hash a password using the configured algorithm.

        Args:
            password: Plain text password to hash

        Returns:
            str: Hashed password string

        Example:
            >>> pm = PasswordManager(settings)
            >>> pm.hash_password("secret1").startswith("$argon2id$")
            True
        """
        if self._preferred_algorithm == "argon2":
            return self._argon2_hasher.hash(password)
        salt = bcrypt.gensalt(rounds=self._bcrypt_rounds)
        return bcrypt.hashpw(self._bcrypt_bytes(password), salt).decode("utf-8")

    def verify_password(
        self,
        plain_password: str,
        hashed_password: str
    ) -> Tuple[bool, bool]:
        """
        Verify a password against its hash with algorithm detection.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Stored password hash

        Returns:
            Tuple[bool, bool]: (is_valid, needs_rehash)
                - is_valid: True if password matches
                - needs_rehash: True if the hash should be regenerated with
                                the current algorithm or parameters
        """
        if not hashed_password:
            return False, False

        if hashed_password.startswith("$argon2"):
            try:
                self._argon2_hasher.verify(hashed_password, plain_password)
            except (VerificationError, InvalidHashError):
                return False, False
            needs_rehash = (
                self._preferred_algorithm != "argon2"
                or self._argon2_hasher.check_needs_rehash(hashed_password)
            )
            return True, needs_rehash

        if hashed_password.startswith("$2"):
            try:
                is_valid = bcrypt.checkpw(
                    self._bcrypt_bytes(plain_password),
                    hashed_password.encode("utf-8"),
                )
            except ValueError:
                return False, False
            return is_valid, is_valid and self._preferred_algorithm == "argon2"

        # Unknown hash format
        return False, False

    @staticmethod
    def _bcrypt_bytes(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


# =============================================================================
# JWT TOKEN PAYLOAD MODELS
# =============================================================================

class TokenClaims(BaseModel):
    """
    JWT claims carried by access and refresh tokens.

    Attributes:
        user_id: Subject user identifier
        email: User email at issue time
        role: User role at issue time
        type: access or refresh
        jti: Unique token identifier
        iss: Issuer
        iat: Issued at timestamp
        exp: Expiration timestamp
    """
    user_id: str
    email: str
    role: str
    type: TokenType
    jti: str
    iss: str
    iat: datetime
    exp: datetime


# =============================================================================
# JWT TOKEN MANAGER
# =============================================================================

class JWTManager:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    JWT TOKEN MANAGER                                     │
    │  Issues and validates HMAC signed access and refresh tokens             │
    └─────────────────────────────────────────────────────────────────────────┘

    Token Types:
        - Access Token:  JWT_EXPIRATION (default 24h), for API access
        - Refresh Token: JWT_REFRESH_EXPIRATION (default 7 days), exchanged
                         for a new access token
    """

    def __init__(self, settings: Settings):
        """Initialize JWT manager with configured settings."""
        self._secret_key = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self._issuer = settings.jwt_issuer
        self._access_token_expire = settings.jwt_expiration
        self._refresh_token_expire = settings.jwt_refresh_expiration

    @property
    def access_token_expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return int(self._access_token_expire.total_seconds())

    def create_token(
        self,
        user_id: str,
        email: str,
        role: str,
        token_type: TokenType = "access",
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed JWT.

        Args:
            user_id: User identifier
            email: User email
            role: User role
            token_type: access or refresh
            expires_delta: Override of the configured lifetime

        Returns:
            str: Encoded JWT token
        """
        now = datetime.now(timezone.utc)

        if expires_delta is None:
            if token_type == "refresh":
                expires_delta = self._refresh_token_expire
            else:
                expires_delta = self._access_token_expire

        claims = {
            "user_id": user_id,
            "email": email,
            "role": role,
            "type": token_type,
            "jti": str(uuid4()),
            "iss": self._issuer,
            "iat": now,
            "exp": now + expires_delta,
        }

        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def decode_token(
        self,
        token: str,
        expected_type: Optional[TokenType] = None,
    ) -> TokenClaims:
        """
        Decode and validate a JWT token.

        Verifies signature, expiry and issuer, and optionally the token type.

        Args:
            token: Encoded JWT token
            expected_type: Reject tokens of any other type

        Returns:
            TokenClaims: Decoded and validated claims

        Raises:
            TokenExpiredError: If token has expired
            TokenInvalidError: If token is malformed, badly signed, from
                               another issuer or of the wrong type
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                issuer=self._issuer,
            )
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            raise TokenInvalidError(details={"reason": str(e)})

        try:
            claims = TokenClaims(
                user_id=payload["user_id"],
                email=payload["email"],
                role=payload["role"],
                type=payload["type"],
                jti=payload["jti"],
                iss=payload["iss"],
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TokenInvalidError(details={"reason": f"malformed claims: {e}"})

        if expected_type is not None and claims.type != expected_type:
            raise TokenInvalidError(
                details={"reason": f"expected {expected_type} token"}
            )

        return claims
