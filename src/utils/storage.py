"""
Storage utility.

File I/O helpers for practice sessions and user progress.
"""

import json
import os
import logging
from typing import List, Optional

from src.models.session import PracticeSession, UserProgress

logger = logging.getLogger(__name__)


class JsonSessionStore:
    """
    Key-value session store backed by JSON files.

    Handles:
    - Practice sessions (data/sessions/<user_id>/<session_id>.json)
    - User progress (data/progress/<user_id>.json)
    """

    def __init__(self, data_root: str):
        """
        Initialize session store.

        Args:
            data_root: Root data directory (e.g., /path/to/data)
        """
        self.data_root = data_root
        self.sessions_dir = os.path.join(data_root, "sessions")
        self.progress_dir = os.path.join(data_root, "progress")

        os.makedirs(self.sessions_dir, exist_ok=True)
        os.makedirs(self.progress_dir, exist_ok=True)

        logger.info(f"Initialized JsonSessionStore with data_root={data_root}")

    def _user_dir(self, user_id: str) -> str:
        return os.path.join(self.sessions_dir, user_id)

    def save_session(self, session: PracticeSession) -> None:
        """
        Persist a practice session.

        Args:
            session: Scored practice session
        """
        user_dir = self._user_dir(session.user_id)
        os.makedirs(user_dir, exist_ok=True)
        filepath = os.path.join(user_dir, f"{session.session_id}.json")

        try:
            with open(filepath, 'w') as f:
                json.dump(session.to_dict(), f, indent=2)
            logger.info(f"Saved session {session.session_id} to {filepath}")
        except OSError as e:
            logger.error(f"Failed to save session {session.session_id}: {e}")
            raise

    def load_session(self, user_id: str, session_id: str) -> Optional[PracticeSession]:
        """
        Load a single session.

        Returns:
            PracticeSession, or None if it doesn't exist or is unreadable
        """
        filepath = os.path.join(self._user_dir(user_id), f"{session_id}.json")

        if not os.path.exists(filepath):
            logger.debug(f"No session {session_id} for user {user_id}")
            return None

        try:
            with open(filepath, 'r') as f:
                return PracticeSession.from_dict(json.load(f))
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Failed to load session {session_id}: {e}")
            return None

    def list_sessions(self, user_id: str) -> List[PracticeSession]:
        """
        Load all sessions for a user.

        Returns:
            Sessions sorted by creation time, oldest first
        """
        user_dir = self._user_dir(user_id)
        if not os.path.isdir(user_dir):
            return []

        sessions = []
        for filename in os.listdir(user_dir):
            if not filename.endswith('.json'):
                continue
            session = self.load_session(user_id, filename[:-len('.json')])
            if session is not None:
                sessions.append(session)

        return sorted(sessions, key=lambda s: s.created_at)

    def save_progress(self, progress: UserProgress) -> None:
        filepath = os.path.join(self.progress_dir, f"{progress.user_id}.json")

        try:
            with open(filepath, 'w') as f:
                json.dump(progress.to_dict(), f, indent=2)
            logger.debug(f"Saved progress for {progress.user_id}")
        except OSError as e:
            logger.error(f"Failed to save progress for {progress.user_id}: {e}")
            raise

    def load_progress(self, user_id: str) -> Optional[UserProgress]:
        filepath = os.path.join(self.progress_dir, f"{user_id}.json")

        if not os.path.exists(filepath):
            return None

        try:
            with open(filepath, 'r') as f:
                return UserProgress.from_dict(json.load(f))
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Failed to load progress for {user_id}: {e}")
            return None
