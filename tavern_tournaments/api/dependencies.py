from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from tavern_tournaments.core import security
from tavern_tournaments.core.database import SessionLocal

# Tokens come from the host application's login; this service never issues them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

async def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    return security.verify_token(token, credentials_exception)
