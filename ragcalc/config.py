"""
Configuration settings for the RAG Pricing Calculator.
Loads environment variables and defines constants for the API, scraper and LLM analyzer.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Resolve project root (one level up from ragcalc/)
ROOT_DIR = Path(__file__).parent.parent
env_path = ROOT_DIR / ".env"

if env_path.exists():
    load_dotenv(dotenv_path=env_path)
else:
    load_dotenv()  # Fallback

PORT = int(os.getenv("PORT", 3001))
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
DEFAULT_LLM_MODEL = os.getenv("DEFAULT_LLM_MODEL", "gemini-2.0-flash")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./ragcalc.db")

# Optional live exchange rates endpoint returning {"rates": {"EUR": 0.92, ...}}
EXCHANGE_RATES_URL = os.getenv("EXCHANGE_RATES_URL")

SCRAPER_HEADLESS = os.getenv("SCRAPER_HEADLESS", "true").lower() != "false"
LOG_DIR = os.getenv("LOG_DIR", "logs")
