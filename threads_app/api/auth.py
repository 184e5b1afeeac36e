"""
Authentication: Supabase JWT validation and current identity/user dependencies.

We only validate the JWT; profiles live in MongoDB. The token's "sub" claim is
the external id that User.external_id is matched against.

Supabase can sign JWTs with:
- RS256/ES256 (asymmetric): verify using public keys from JWKS.
- HS256 (legacy): verify using SUPABASE_JWT_SECRET.
"""

import logging
from typing import Annotated, Any, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient
from pydantic import BaseModel

from threads_app.config import get_settings
from threads_app.models.user import User

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=True)
optional_security = HTTPBearer(auto_error=False)


class Identity(BaseModel):
    """The signed-in person as reported by the identity provider."""

    external_id: str
    email: Optional[str] = None


def _get_jwks_url() -> str:
    """JWKS URL for this Supabase project (public keys for RS256/ES256)."""
    base = (get_settings().supabase_url or "").rstrip("/")
    if not base or "your-project" in base:
        raise ValueError("Set SUPABASE_URL in .env to your project URL (e.g. https://xxx.supabase.co)")
    return f"{base}/auth/v1/.well-known/jwks.json"


def _decode_token_rs256_es256(token: str) -> dict[str, Any]:
    jwks_url = _get_jwks_url()
    client = PyJWKClient(jwks_url)
    signing_key = client.get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["RS256", "ES256"],
        options={"verify_aud": False},
    )


def _decode_token_hs256(token: str, secret: str) -> dict[str, Any]:
    return jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        options={"verify_aud": False},
    )


def decode_token(token: str) -> dict[str, Any]:
    """
    Verify a Supabase JWT and return its claims.
    Raises HTTPException 401 for bad tokens, 503 when auth is not configured.
    """
    try:
        unverified = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid JWT header: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token format")

    alg = unverified.get("alg")
    if not alg:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing algorithm")

    if alg in ("RS256", "ES256"):
        try:
            return _decode_token_rs256_es256(token)
        except ValueError as e:
            logger.warning("JWKS URL misconfigured: %s", e)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Set SUPABASE_URL to your project URL (e.g. https://xxx.supabase.co).",
            )
        except jwt.ExpiredSignatureError:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning("JWT verification failed (JWKS): %s", e)
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if alg == "HS256":
        secret = get_settings().supabase_jwt_secret
        if not secret:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication not configured (SUPABASE_JWT_SECRET required for HS256).",
            )
        try:
            return _decode_token_hs256(token, secret)
        except jwt.ExpiredSignatureError:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning("JWT verification failed (HS256): %s", e)
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=f"Unsupported token algorithm: {alg}",
    )


def _identity_from_claims(payload: dict[str, Any]) -> Identity:
    # Standard JWT claims: sub = subject (user id in Supabase)
    external_id = payload.get("sub")
    if not external_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing subject")
    return Identity(external_id=external_id, email=payload.get("email"))


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> Identity:
    """Dependency for action endpoints: a valid token is required."""
    return _identity_from_claims(decode_token(credentials.credentials))


async def get_optional_identity(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(optional_security)],
) -> Optional[Identity]:
    """Dependency for pages: no token means no identity, a bad token is still 401."""
    if credentials is None:
        return None
    return _identity_from_claims(decode_token(credentials.credentials))


async def get_current_user(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> User:
    """Dependency: the onboarded profile of the signed-in user."""
    user = await User.find_one(User.external_id == identity.external_id)
    if user is None or not user.onboarded:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Complete onboarding first")
    return user


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
OptionalIdentity = Annotated[Optional[Identity], Depends(get_optional_identity)]
CurrentUser = Annotated[User, Depends(get_current_user)]
