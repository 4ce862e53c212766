# config.py
# Environment & settings for the book review API.

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

ROOT_DIR = Path(__file__).resolve().parent

PORT = int(os.getenv("PORT", "3000"))
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))
FRONT_ORIGIN = os.getenv("FRONT_ORIGIN", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# ----------------------------
# Config knobs (tunable)
# ----------------------------

class Settings(BaseModel):
    # Storage layout
    users_file_name: str = "users.json"
    reviews_file_name: str = "reviews.json"
    temp_suffix: str = ".tmp"

    # Review rules
    max_tags: int = 10
    default_status: str = "pending"
    min_rating: int = 1
    max_rating: int = 5

    # Credential header read by the auth gate
    api_key_header: str = "x-api-key"


settings = Settings()
