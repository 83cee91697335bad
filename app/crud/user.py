from sqlalchemy.orm import Session
from app import models


def create_user(db: Session, *, name: str, email: str, password_hash: str, role: str):
    db_user = models.User(
        name=name,
        email=email.strip().lower(),
        password_hash=password_hash,
        role=role,
        is_active=True,
    )
    db.add(db_user)
    db.flush()
    return db_user

def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == email.strip().lower()).first()

def get_user(db: Session, user_id: int):
    return db.query(models.User).filter(models.User.id == user_id).first()
