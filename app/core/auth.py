from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt

from app.core.config import settings
from app.schemas.auth import TokenData


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create an access token for a till session.

    Args:
        data: Token payload (must include 'sub', 'client_id' and 'branch_id')
        expires_delta: Custom expiration time

    Returns:
        Encoded JWT access token
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    # JWT requires string subjects; tenant ids may arrive as integers
    for claim in ("sub", "client_id", "branch_id"):
        if claim in to_encode and to_encode[claim] is not None:
            to_encode[claim] = str(to_encode[claim])

    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": "access",
    })

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def verify_token(token: str, token_type: str = "access") -> Optional[TokenData]:
    """
    Verify a JWT token and extract the tenant claims.

    Returns:
        TokenData if valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    user_id: Optional[str] = payload.get("sub")
    client_id: Optional[str] = payload.get("client_id")
    branch_id: Optional[str] = payload.get("branch_id")

    if payload.get("type") != token_type:
        return None
    if not user_id or not client_id or not branch_id:
        return None

    return TokenData(
        user_id=user_id,
        client_id=client_id,
        branch_id=branch_id,
        device_id=payload.get("device_id")
    )
