import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import get_password_hash
from app.crud.base import parse_uuid
from app.db.models import User


def get_user_by_email(db: Session, email: str):
    result = db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


def get_user(db: Session, user_id):
    user_uuid = parse_uuid(user_id)
    if user_uuid is None:
        return None
    return db.get(User, user_uuid)


def create_user(db: Session, name: str, email: str, password: str):
    db_user = User(
        id=uuid.uuid4(),
        name=name.strip(),
        email=email.strip().lower(),
        password_hash=get_password_hash(password),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user
