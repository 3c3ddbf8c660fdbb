from typing import Optional

from authlib.common.security import generate_token
from authlib.oauth2.rfc7636 import create_s256_code_challenge
from jose import jwt, JWTError

from app.config import get_settings

settings = get_settings()

# Supabase signs its access tokens with HS256 for the "authenticated" role
SUPABASE_JWT_ALGORITHM = "HS256"
SUPABASE_JWT_AUDIENCE = "authenticated"


def generate_pkce_pair() -> tuple[str, str]:
    """
    Create a PKCE code verifier and its S256 challenge.

    Returns:
        (code_verifier, code_challenge)
    """
    code_verifier = generate_token(64)
    return code_verifier, create_s256_code_challenge(code_verifier)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode a Supabase access token.

    The signature is verified only when SUPABASE_JWT_SECRET is configured,
    otherwise the claims are read as-is.

    Args:
        token: The JWT access token

    Returns:
        Decoded claims if the token could be read, None otherwise
    """
    try:
        if settings.supabase_jwt_secret:
            return jwt.decode(
                token,
                settings.supabase_jwt_secret,
                algorithms=[SUPABASE_JWT_ALGORITHM],
                audience=SUPABASE_JWT_AUDIENCE,
            )
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


def token_expiry(token: str) -> Optional[int]:
    """Return the `exp` claim (unix seconds) of an access token, if any."""
    claims = decode_access_token(token)
    if not claims:
        return None

    exp = claims.get("exp")
    return int(exp) if exp is not None else None
