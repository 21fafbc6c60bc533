"""
CoLearn Configuration
Storage backend, Gemini keys, auth and class settings
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Storage
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")  # mongo | memory
MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017/")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "colearn_db")

# Gemini (tutor and backup keys fall back to the primary key)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_TUTOR_API_KEY = os.getenv("GEMINI_TUTOR_API_KEY") or GEMINI_API_KEY
GEMINI_BACKUP_API_KEY = os.getenv("GEMINI_BACKUP_API_KEY") or GEMINI_API_KEY
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# Auth
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "colearn-dev-secret")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "10080"))

# Classes
CLASS_MAX_MEMBERS = int(os.getenv("CLASS_MAX_MEMBERS", "50"))

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
