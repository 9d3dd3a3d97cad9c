from fastapi import Header, HTTPException, status


async def get_access_token(
    authorization: str | None = Header(default=None, convert_underscores=False),
) -> str:
    """Bearer token of the caller, forwarded as-is to the billing API."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing auth token"
        )
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth token"
        )
    return token
