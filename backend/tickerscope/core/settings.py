# backend/tickerscope/core/settings.py
import os
from pathlib import Path
from pydantic import BaseModel
from dotenv import load_dotenv

# Resolve backend directory and load .env explicitly
BACKEND_DIR = Path(__file__).resolve().parents[2]  # .../backend
load_dotenv(BACKEND_DIR / ".env")  # do NOT set override=True; shell exports still win

class Settings(BaseModel):
    env: str = os.getenv("APP_ENV", "dev")
    data_dir: str = os.getenv("TICKERSCOPE_DATA_DIR", str(BACKEND_DIR / "assets"))

    # catalog + market data inputs (relative names resolve under data_dir)
    description_file: str = os.getenv("DESCRIPTION_FILE", "description.json")
    tags_weight_file: str = os.getenv("TAGS_WEIGHT_FILE", "tags_weight.json")
    compare_file: str = os.getenv("COMPARE_FILE", "Compare_All.txt")
    marketcap_file: str = os.getenv("MARKETCAP_FILE", "marketcap_pe.txt")
    volume_file: str = os.getenv("VOLUME_FILE", "volume.txt")
    sectors_file: str = os.getenv("SECTORS_FILE", "Sectors_All.json")

    history_path: str = os.getenv("HISTORY_PATH", str(BACKEND_DIR / ".cache" / "search_history.json"))
    history_limit: int = int(os.getenv("HISTORY_LIMIT", "10"))
    similar_limit: int = int(os.getenv("SIMILAR_LIMIT", "50"))
    fuzzy_max_distance: int = int(os.getenv("FUZZY_MAX_DISTANCE", "1"))
    search_max_workers: int = int(os.getenv("SEARCH_MAX_WORKERS", "4"))

    def data_path(self, name: str) -> Path:
        p = Path(name)
        return p if p.is_absolute() else Path(self.data_dir) / p

settings = Settings()
