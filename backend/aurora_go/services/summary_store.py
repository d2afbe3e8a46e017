"""Durable state for the daily digest: last-sent date and summary history."""

import logging
from datetime import date

from sqlalchemy.orm import Session, sessionmaker

from aurora_go.database import SessionLocal
from aurora_go.models.state import AppState
from aurora_go.models.summary import DailySummaryRecord
from aurora_go.schemas.summary import DailyStats, DailySummary

logger = logging.getLogger(__name__)

LAST_SENT_KEY = "daily_summary.last_sent_date"


class SummaryStore:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    def get_last_sent_date(self) -> date | None:
        db: Session = self._session_factory()
        try:
            row = db.get(AppState, LAST_SENT_KEY)
            if row is None or not row.value:
                return None
            return date.fromisoformat(row.value)
        finally:
            db.close()

    def set_last_sent_date(self, sent_on: date):
        db: Session = self._session_factory()
        try:
            row = db.get(AppState, LAST_SENT_KEY)
            if row is None:
                db.add(AppState(key=LAST_SENT_KEY, value=sent_on.isoformat()))
            else:
                row.value = sent_on.isoformat()
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def save_summary(self, summary: DailySummary, emailed: bool):
        db: Session = self._session_factory()
        try:
            db.add(DailySummaryRecord(
                summary_date=summary.stats.date,
                verdict=summary.verdict,
                description=summary.description,
                peak_similarity=summary.peak_similarity,
                peak_time=summary.peak_time.replace(tzinfo=None) if summary.peak_time else None,
                good_bz_minutes=summary.good_bz_minutes,
                min_bz=summary.stats.bz.min if summary.stats.bz else None,
                data_points=summary.stats.data_points,
                stats_json=summary.stats.model_dump(mode="json"),
                emailed=emailed,
            ))
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error("Failed to persist daily summary for %s: %s", summary.stats.date, e)
        finally:
            db.close()

    def latest_summary(self) -> DailySummary | None:
        db: Session = self._session_factory()
        try:
            rec = (
                db.query(DailySummaryRecord)
                .order_by(DailySummaryRecord.summary_date.desc(), DailySummaryRecord.id.desc())
                .first()
            )
            if rec is None:
                return None
            good_minutes = rec.good_bz_minutes or 0
            return DailySummary(
                stats=DailyStats.model_validate(rec.stats_json),
                good_bz_minutes=good_minutes,
                good_bz_hours=round(good_minutes / 60, 1),
                peak_similarity=rec.peak_similarity,
                peak_time=rec.peak_time,
                verdict=rec.verdict,
                description=rec.description or "",
            )
        finally:
            db.close()
