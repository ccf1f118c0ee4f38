"""
Progress tracking and reporting.

Updates the per-user progress record after each session and aggregates
session history into progress reports and CSV exports.
"""

import logging
import math
import os
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pandas as pd

import config.settings as settings
from src.models.session import PracticeSession, UserProgress
from src.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

TREND_WINDOW = 5
TREND_SAMPLE = 3
TREND_BAND = 0.5
WEEKS_PER_MONTH = 4.3

# (id, name, description, metric, threshold)
ACHIEVEMENTS = [
    ("first_pitch", "First Steps", "Complete your first practice session", "total_sessions", 1),
    ("five_sessions", "Getting Started", "Complete 5 practice sessions", "total_sessions", 5),
    ("ten_sessions", "Committed Learner", "Complete 10 practice sessions", "total_sessions", 10),
    ("high_scorer", "Excellence Achiever", "Maintain an average score of 8 or higher", "average_score", 8),
    ("week_streak", "Consistent Practitioner", "Practice for 7 consecutive days", "streak", 7),
    ("month_streak", "Dedicated Speaker", "Practice for 30 consecutive days", "streak", 30),
]


def update_progress(
    current: Optional[UserProgress],
    user_id: str,
    score: int,
    now: datetime
) -> UserProgress:
    """
    Fold a new session score into the user's progress record.

    Streak rules (calendar days): next day → +1, same day → unchanged,
    gap of more than one day → reset to 1.

    Args:
        current: Existing progress, or None for a first session
        user_id: Owner of the progress record
        score: Rounded session score
        now: Session timestamp

    Returns:
        New UserProgress (current is not modified)
    """
    if current is None or current.total_sessions == 0:
        return UserProgress(
            user_id=user_id,
            streak=1,
            total_sessions=1,
            average_score=float(score),
            last_practice_date=now.isoformat()
        )

    streak = current.streak
    if current.last_practice_date:
        last_day = datetime.fromisoformat(current.last_practice_date).date()
        days_diff = (now.date() - last_day).days
        if days_diff == 1:
            streak += 1
        elif days_diff > 1:
            streak = 1
    else:
        streak = 1

    total_sessions = current.total_sessions + 1
    average_score = (current.average_score * current.total_sessions + score) / total_sessions

    return UserProgress(
        user_id=user_id,
        streak=streak,
        total_sessions=total_sessions,
        average_score=average_score,
        last_practice_date=now.isoformat()
    )


class ProgressReporter:
    """
    Aggregates practice sessions into progress statistics.
    """

    def _to_frame(self, sessions: List[PracticeSession]) -> pd.DataFrame:
        rows = [
            {
                "session_id": s.session_id,
                "created_at": s.created_at,
                "topic": s.topic,
                "goal": s.goal,
                "score": s.score
            }
            for s in sessions
        ]
        df = pd.DataFrame(rows, columns=["session_id", "created_at", "topic", "goal", "score"])
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True, format="ISO8601")
        return df.sort_values("created_at", ascending=False).reset_index(drop=True)

    def build_report(
        self,
        sessions: List[PracticeSession],
        progress: Optional[UserProgress],
        now: Optional[datetime] = None
    ) -> Dict:
        """
        Build the progress report for one user.

        Args:
            sessions: All sessions of the user
            progress: Stored progress record, if any
            now: Reference time (defaults to current UTC time)

        Returns:
            Progress report dict (JSON-serializable)
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        df = self._to_frame(sessions)

        if progress is not None and progress.total_sessions > 0:
            total_sessions = progress.total_sessions
            average_score = progress.average_score
            streak = progress.streak
            last_practice = progress.last_practice_date
        else:
            total_sessions = len(df)
            average_score = float(df["score"].mean()) if not df.empty else 0.0
            streak = 0
            last_practice = df["created_at"].iloc[0].isoformat() if not df.empty else None

        window_start = pd.Timestamp(now - timedelta(days=settings.FREQUENCY_WINDOW_DAYS))
        week_start = pd.Timestamp(now - timedelta(days=7))
        monthly_count = int((df["created_at"] >= window_start).sum())
        weekly_count = int((df["created_at"] >= week_start).sum())

        recent = df.head(settings.RECENT_SESSIONS_LIMIT)
        score_trend = [
            {
                "score": int(row.score),
                "date": row.created_at.isoformat(),
                "topic": row.topic
            }
            for row in recent.head(TREND_WINDOW).itertuples()
        ]

        days_since_last = None
        if last_practice:
            last_dt = datetime.fromisoformat(last_practice)
            if last_dt.tzinfo is None:
                last_dt = last_dt.replace(tzinfo=timezone.utc)
            days_since_last = (now - last_dt).days

        report = {
            "totalSessions": total_sessions,
            "averageScore": round_half_up(average_score, 1),
            "streak": streak,
            "lastPracticeDate": last_practice,
            "practiceFrequency": round_half_up(monthly_count / WEEKS_PER_MONTH, 1),
            "improvementTrend": self._improvement_trend([s["score"] for s in score_trend]),
            "userLevel": self._user_level(total_sessions, average_score),
            "daysSinceLastPractice": days_since_last,
            "recentSessions": score_trend,
            "goals": {
                "weeklyTarget": settings.WEEKLY_SESSION_TARGET,
                "streakTarget": settings.STREAK_TARGET_DAYS,
                "scoreTarget": settings.SCORE_TARGET
            },
            "goalsProgress": {
                "weeklyProgress": min(weekly_count / settings.WEEKLY_SESSION_TARGET, 1.0),
                "streakProgress": min(streak / settings.STREAK_TARGET_DAYS, 1.0),
                "scoreProgress": min(average_score / settings.SCORE_TARGET, 1.0)
            },
            "achievements": self._achievements(total_sessions, average_score, streak, now),
            "updatedAt": now.isoformat()
        }

        logger.debug(f"Built progress report: {total_sessions} sessions, avg={report['averageScore']}")
        return report

    def export_csv(self, sessions: List[PracticeSession], output_path: str) -> str:
        """
        Write the session history table to CSV.

        Args:
            sessions: Sessions to export
            output_path: Destination CSV path

        Returns:
            Path to the written CSV
        """
        df = self._to_frame(sessions)
        df["created_at"] = df["created_at"].map(lambda ts: ts.isoformat())

        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        df.to_csv(output_path, index=False)

        logger.info(f"Exported {len(df)} sessions to {output_path}")
        return output_path

    def build_history(
        self,
        sessions: List[PracticeSession],
        page: int = 1,
        limit: int = settings.HISTORY_DEFAULT_LIMIT,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        min_score: Optional[int] = None,
        max_score: Optional[int] = None
    ) -> Dict:
        """
        Filter, order and paginate a user's session history.

        Unparseable dates are ignored as filters. date_to includes the
        whole day it names.

        Args:
            sessions: All sessions of the user
            page: 1-indexed page number (already normalized)
            limit: Page size (already clamped)
            date_from: Earliest creation date
            date_to: Latest creation date, inclusive to 23:59:59.999
            min_score: Lowest stored score to include
            max_score: Highest stored score to include

        Returns:
            History page dict (JSON-serializable)
        """
        df = self._to_frame(sessions)
        mask = pd.Series(True, index=df.index)

        from_ts = _parse_day(date_from)
        if from_ts is not None:
            mask &= df["created_at"] >= from_ts

        to_ts = _parse_day(date_to)
        if to_ts is not None:
            end_of_day = to_ts.normalize() + pd.Timedelta(days=1) - pd.Timedelta(milliseconds=1)
            mask &= df["created_at"] <= end_of_day

        if min_score is not None:
            mask &= df["score"] >= min_score
        if max_score is not None:
            mask &= df["score"] <= max_score

        filtered = df[mask]
        total_count = len(filtered)
        total_pages = math.ceil(total_count / limit)
        page_df = filtered.iloc[(page - 1) * limit:page * limit]

        by_id = {s.session_id: s for s in sessions}
        rows = []
        for row in page_df.itertuples():
            session = by_id[row.session_id]
            rows.append({
                "id": session.session_id,
                "topic": session.topic,
                "goal": session.goal,
                "mainPoints": list(session.main_points),
                "pitch": session.pitch,
                "score": session.score,
                "feedback": session.feedback,
                "createdAt": row.created_at.isoformat(),
                "date": row.created_at.strftime("%Y-%m-%d")
            })

        scores = [r["score"] for r in rows]
        logger.debug(f"History page {page}/{total_pages}: {len(rows)} of {total_count} sessions")

        return {
            "sessions": rows,
            "pagination": {
                "currentPage": page,
                "totalPages": total_pages,
                "totalCount": total_count,
                "limit": limit,
                "hasNextPage": page < total_pages,
                "hasPreviousPage": page > 1
            },
            "filters": {
                "dateFrom": date_from or None,
                "dateTo": date_to or None,
                "minScore": min_score,
                "maxScore": max_score
            },
            "summary": {
                "totalSessions": total_count,
                "averageScore": round_half_up(sum(scores) / len(scores), 1) if scores else 0,
                "highestScore": max(scores) if scores else 0,
                "lowestScore": min(scores) if scores else 0
            }
        }

    @staticmethod
    def _achievements(
        total_sessions: int,
        average_score: float,
        streak: int,
        now: datetime
    ) -> List[Dict]:
        metrics = {
            "total_sessions": total_sessions,
            "average_score": average_score,
            "streak": streak
        }
        achievements = []
        for achievement_id, name, description, metric, threshold in ACHIEVEMENTS:
            earned = metrics[metric] >= threshold
            achievements.append({
                "id": achievement_id,
                "name": name,
                "description": description,
                "earned": earned,
                "earnedAt": now.isoformat() if earned else None
            })
        return achievements

    @staticmethod
    def _improvement_trend(scores: List[int]) -> str:
        """Compare the newest and oldest scores of the trend window (newest first)."""
        if len(scores) < TREND_SAMPLE:
            return "stable"
        recent_avg = sum(scores[:TREND_SAMPLE]) / TREND_SAMPLE
        older_avg = sum(scores[-TREND_SAMPLE:]) / TREND_SAMPLE
        if recent_avg > older_avg + TREND_BAND:
            return "improving"
        if recent_avg < older_avg - TREND_BAND:
            return "declining"
        return "stable"

    @staticmethod
    def _user_level(total_sessions: int, average_score: float) -> str:
        if total_sessions >= 10 and average_score >= 7:
            return "Advanced"
        if total_sessions >= 5 and average_score >= 5:
            return "Intermediate"
        return "Beginner"


def _parse_day(value: Optional[str]) -> Optional[pd.Timestamp]:
    """Parse a date filter as a UTC timestamp; None when absent or invalid."""
    if not value:
        return None
    try:
        ts = pd.Timestamp(value)
    except ValueError:
        logger.warning(f"Ignoring invalid date filter: {value!r}")
        return None
    if ts is pd.NaT:
        return None
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")
