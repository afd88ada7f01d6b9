import logging
from datetime import date
from typing import Dict, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.grouping import group_by
from campusconnect.models import TimetableEntry
from campusconnect.timetable.schemas import TimetableSaveRequest

logger = logging.getLogger(__name__)

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
DEFAULT_PERIODS = 7


def build_grid(entries: List[TimetableEntry], min_periods: int = 0) -> dict:
    """Day x period grid; the number of periods is the highest one used, at least ``min_periods``."""
    periods = max([e.period for e in entries] + [min_periods])
    slots: Dict[Tuple[str, int], TimetableEntry] = {}
    for entry in entries:
        slots.setdefault((entry.day, entry.period), entry)
    return {
        "periods": periods,
        "days": [
            {"day": day, "cells": [slots.get((day, period)) for period in range(1, periods + 1)]}
            for day in DAYS
        ],
    }


def fetch_timetable(db: Session, class_name: str, newest_first: bool = False) -> List[TimetableEntry]:
    try:
        query = db.query(TimetableEntry).filter(TimetableEntry.class_name == class_name)
        if newest_first:
            query = query.order_by(TimetableEntry.created_at.desc(), TimetableEntry.id.desc())
        else:
            query = query.order_by(TimetableEntry.id.asc())
        return query.all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching timetable: {e}")
        return []


def save_timetable(db: Session, request: TimetableSaveRequest) -> Tuple[int, int]:
    """Update entries that carry an id, insert the rest. Returns (updated, inserted)."""
    updated = inserted = 0
    for cell in request.entries:
        if cell.id is not None:
            entry = db.query(TimetableEntry).filter(TimetableEntry.id == cell.id).first()
            if entry is None:
                raise LookupError(f"Timetable entry {cell.id} not found")
            entry.subject = cell.subject
            entry.time = cell.time
            entry.date = request.date
            updated += 1
        else:
            db.add(TimetableEntry(
                class_name=request.class_name,
                day=cell.day,
                period=cell.period,
                subject=cell.subject,
                time=cell.time,
                date=request.date,
            ))
            inserted += 1
        db.flush()
    db.commit()
    return updated, inserted


def build_timetable_view(entries: List[TimetableEntry]) -> List[dict]:
    return [
        {"date": on, "grid": build_grid(group), "entries": group}
        for on, group in group_by(entries, lambda e: e.date).items()
    ]


def delete_entry(db: Session, entry_id: int) -> int:
    deleted = db.query(TimetableEntry).filter(TimetableEntry.id == entry_id).delete(synchronize_session=False)
    db.commit()
    return deleted


def delete_group(db: Session, class_name: str, on: date) -> int:
    """Delete the timetable of a class created for one date, by the ids in that group."""
    ids = [
        entry_id for (entry_id,) in db.query(TimetableEntry.id)
        .filter(TimetableEntry.class_name == class_name, TimetableEntry.date == on)
        .all()
    ]
    if not ids:
        return 0
    deleted = db.query(TimetableEntry).filter(TimetableEntry.id.in_(ids)).delete(synchronize_session=False)
    db.commit()
    return deleted
