# /select_start/config.py
"""
Configuration settings for the application.
Loads environment variables and provides them throughout the app.
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv(override=True)

# MongoDB settings
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/select-start")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "select-start")
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

# API Keys
API_KEY = os.getenv("API_KEY")
ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")

# Report cache
CACHE_DIR = os.getenv("CACHE_DIR", "cache")
MONTHLY_CACHE_MINUTES = float(os.getenv("MONTHLY_CACHE_MINUTES", "15"))
YEARLY_CACHE_MINUTES = float(os.getenv("YEARLY_CACHE_MINUTES", "30"))
NOMINATIONS_CACHE_MINUTES = float(os.getenv("NOMINATIONS_CACHE_MINUTES", "10"))

# RetroAchievements web API (optional game metadata)
RA_USERNAME = os.getenv("RA_USERNAME")
RA_API_KEY = os.getenv("RA_API_KEY")
RA_API_BASE_URL = os.getenv("RA_API_BASE_URL", "https://retroachievements.org/API")
ENRICHMENT_TIMEOUT_SECONDS = float(os.getenv("ENRICHMENT_TIMEOUT_SECONDS", "5"))

PORT = int(os.getenv("PORT", "8000"))
