# vulnscan_api/crud/crud_scan.py
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Any, Dict, Iterable, List, Optional, Tuple
from vulnscan_api.models.scan import Scan, STATUS_COMPLETED
from vulnscan_api.crud.crud_user import pagination_info


def _visible(db: Session, *, user_id: Optional[str]):
    """Scans visible to a caller; `user_id=None` means every scan (administrators)."""
    query = db.query(Scan)
    if user_id is not None:
        query = query.filter(Scan.user_id == user_id)
    return query


def get(db: Session, *, scan_id: str, user_id: Optional[str] = None) -> Scan | None:
    return _visible(db, user_id=user_id).filter(Scan.id == scan_id).first()


def get_by_report(db: Session, *, report_id: str, user_id: Optional[str] = None) -> Scan | None:
    return _visible(db, user_id=user_id).filter(Scan.report_id == report_id).first()


def get_recent_for_user(db: Session, *, user_id: str, limit: int = 5) -> List[Scan]:
    return db.query(Scan).filter(Scan.user_id == user_id).order_by(Scan.created_at.desc()).limit(limit).all()


def count(db: Session, *, user_id: Optional[str] = None, statuses: Optional[Iterable[str]] = None) -> int:
    query = _visible(db, user_id=user_id)
    if statuses is not None:
        query = query.filter(Scan.status.in_(list(statuses)))
    return query.count()


def vulnerability_totals(db: Session, *, user_id: Optional[str] = None) -> Dict[str, int]:
    """Per-severity sums over completed scans."""
    row = _visible(db, user_id=user_id).filter(Scan.status == STATUS_COMPLETED).with_entities(
        func.coalesce(func.sum(Scan.high_vulnerabilities), 0),
        func.coalesce(func.sum(Scan.medium_vulnerabilities), 0),
        func.coalesce(func.sum(Scan.low_vulnerabilities), 0),
        func.coalesce(func.sum(Scan.info_vulnerabilities), 0),
    ).one()
    high, medium, low, info = (int(v) for v in row)
    return {"high": high, "medium": medium, "low": low, "info": info, "total": high + medium + low + info}


def create(db: Session, *, scan_obj: Scan) -> Scan:
    db.add(scan_obj)
    db.commit()
    db.refresh(scan_obj)
    return scan_obj


def update(db: Session, *, db_obj: Scan, obj_in: Dict[str, Any]) -> Scan:
    for field, value in obj_in.items():
        setattr(db_obj, field, value)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def remove(db: Session, *, db_obj: Scan):
    db.delete(db_obj)
    db.commit()


def get_multi_paginated(db: Session, *, page: int, page_size: int, user_id: Optional[str] = None,
                        status: Optional[str] = None) -> Tuple[List[Scan], Dict[str, Any]]:
    query = _visible(db, user_id=user_id)
    if status:
        query = query.filter(Scan.status == status)

    total_items = query.count()
    offset = (page - 1) * page_size
    scans = query.order_by(Scan.created_at.desc()).offset(offset).limit(page_size).all()
    return scans, pagination_info(total_items=total_items, page=page, page_size=page_size)
