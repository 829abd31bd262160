from jose import JWTError, jwt

from tavern_tournaments.core.config import settings

# Tokens are issued by the host application; this service only reads them.

def verify_token(token: str, credentials_exception) -> str:
    """Returns the user id stored in the token's 'sub' claim."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception
    return user_id
