"""
Application configuration read from environment variables.

Database and logging settings live next to the code that uses them
(database.py, logging_config.py); this module holds the web and
session settings.
"""

import os

APP_TITLE = os.getenv("APP_TITLE", "Sistema de Gerenciamento de Alunos")
APP_VERSION = "1.0.0"

# Session cookie carrying the opaque auth token
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "registry_session")
SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", "168"))
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

# Sign-up password policy
MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))
