# /formify-backend/app/config.py

"""
Runtime configuration for the group-formation service.

Every setting is read once from the environment (optionally populated from a
local `.env` file) so that the database, upload directory and allocation
defaults can be changed per deployment without code edits.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# --- DATABASE ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./formify.db")

# --- UPLOADS ---
UPLOADS_DIR = os.getenv("UPLOADS_DIR", "uploads")

# --- HTTP ---
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# --- LOGGING ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- ALLOCATION DEFAULTS ---
# Capacity given to a newly created teacher when the admin does not supply one.
DEFAULT_TEACHER_CAPACITY = int(os.getenv("DEFAULT_TEACHER_CAPACITY", "5"))
