# vulnscan_api/crud/crud_user.py
import math
from datetime import datetime
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Tuple
from vulnscan_api.models.user import User


def get(db: Session, *, user_id: str) -> User | None:
    return db.get(User, user_id)


def get_by_username(db: Session, *, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def get_by_username_or_email(db: Session, *, username: str, email: str) -> User | None:
    """Look up an account clashing with either identifier."""
    return db.query(User).filter(or_(User.username == username, User.email == email)).first()


def get_by_email(db: Session, *, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def count(db: Session, **filters: Any) -> int:
    return db.query(User).filter_by(**filters).count()


def count_created_since(db: Session, *, since: datetime) -> int:
    return db.query(User).filter(User.created_at >= since).count()


def create(db: Session, *, user_obj: User) -> User:
    db.add(user_obj)
    db.commit()
    db.refresh(user_obj)
    return user_obj


def update(db: Session, *, db_obj: User, obj_in: Dict[str, Any]) -> User:
    for field, value in obj_in.items():
        setattr(db_obj, field, value)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def remove(db: Session, *, db_obj: User):
    db.delete(db_obj)
    db.commit()


def get_multi_paginated(db: Session, *, page: int, page_size: int, search: str | None = None) -> Tuple[List[User], Dict[str, Any]]:
    """Newest users first, optionally matching `search` against username or email."""
    query = db.query(User)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(User.username.ilike(pattern), User.email.ilike(pattern)))

    total_items = query.count()
    offset = (page - 1) * page_size
    users = query.order_by(User.created_at.desc()).offset(offset).limit(page_size).all()
    return users, pagination_info(total_items=total_items, page=page, page_size=page_size)


def pagination_info(*, total_items: int, page: int, page_size: int) -> Dict[str, Any]:
    total_pages = math.ceil(total_items / page_size) if total_items > 0 else 1
    return {
        "total_items": total_items,
        "total_pages": total_pages,
        "current_page": page,
        "page_size": page_size,
        "has_next": page < total_pages,
        "has_previous": page > 1,
    }
