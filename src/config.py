"""Configuration and settings."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Google OAuth client secrets (Desktop app JSON downloaded from Cloud Console)
GMAIL_CREDENTIALS_PATH = Path(os.getenv("GMAIL_CREDENTIALS_PATH", "credentials.json"))

# Default token cache; library calls always take the path explicitly
GMAIL_TOKEN_PATH = Path(os.getenv("GMAIL_TOKEN_PATH", "token.json"))

# Default From address for the CLI
GMAIL_SENDER = os.getenv("GMAIL_SENDER", "")

# If modifying these scopes, delete the previously saved token (`logout`).
GMAIL_SCOPES = (
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.compose",
    "https://www.googleapis.com/auth/gmail.modify",
)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE_LOGGING = os.getenv("VERBOSE_LOGGING", "false").lower() == "true"
LOG_FILE = Path(os.environ["LOG_FILE"]) if os.getenv("LOG_FILE") else None
