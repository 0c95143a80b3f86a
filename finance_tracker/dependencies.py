from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from finance_tracker.crud import crud_user
from finance_tracker.db.core import get_db


def get_current_user_id(
    x_user_id: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> int:
    """
    Resolve the caller from the X-User-Id header.

    Identity is established upstream (gateway or session layer); this only
    checks that the id names an existing user.
    """
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing or unknown X-User-Id header",
    )
    if not x_user_id:
        raise unauthorized
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise unauthorized
    if not crud_user.read_db_user(db, user_id):
        raise unauthorized
    return user_id
