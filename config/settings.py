"""
Configuration settings for PitchCoach.

Centralized configuration for provider routing, practice limits and logging.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = Path(os.getenv("PITCHCOACH_DATA_ROOT", str(PROJECT_ROOT / "data")))
OUTPUT_ROOT = PROJECT_ROOT / "output"

# API Configuration (read once at startup)
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_AI_API_KEY", "")

# Provider routing
AI_PROVIDER = os.getenv("AI_PROVIDER", "anthropic")
AI_FALLBACK_PROVIDER = os.getenv("AI_FALLBACK_PROVIDER", "")  # "" = the other provider, "none" = disabled
AI_MAX_RETRIES = int(os.getenv("AI_MAX_RETRIES", "3"))
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))
AI_BACKOFF_BASE_SECONDS = float(os.getenv("AI_BACKOFF_BASE_SECONDS", "1.0"))
AI_RETRY_ON_INVALID_OUTPUT = os.getenv("AI_RETRY_ON_INVALID_OUTPUT", "1") == "1"

# LLM Models
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-3-haiku-20240307")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")

# Generation settings
FEEDBACK_TEMPERATURE = 0.3  # structured JSON output
TOPIC_TEMPERATURE = 0.7
FEEDBACK_MAX_OUTPUT_TOKENS = 4000
TOPIC_MAX_OUTPUT_TOKENS = 200

# Output contract
TOPIC_MIN_LENGTH = 10
SCORE_MIN = 1
SCORE_MAX = 10

# Practice submission limits
TOPIC_MAX_LENGTH = 500
GOAL_MAX_LENGTH = 500
MAX_MAIN_POINTS = 10
PITCH_MIN_LENGTH = 10
PITCH_MAX_LENGTH = 5000
ROLE_MAX_LENGTH = 100

# Progress goals
WEEKLY_SESSION_TARGET = 3
STREAK_TARGET_DAYS = 7
SCORE_TARGET = 8.0
RECENT_SESSIONS_LIMIT = 10
HISTORY_DEFAULT_LIMIT = 10
HISTORY_MAX_LIMIT = 50
FREQUENCY_WINDOW_DAYS = 30

# Local caller identity for the CLI
PRACTICE_USER = os.getenv("PRACTICE_USER", "local-user")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = os.getenv("LOG_FILE", "pitchcoach.log")
