from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_DATA_DIR = Path(__file__).resolve().parent / "data"


@dataclass(frozen=True)
class AppConfig:
    session_secret: str = os.getenv("SESSION_SECRET", "traveloki-secret-change-in-production")
    area: str = os.getenv("TRAVELOKI_AREA", "medan")
    seed_csv: Path = Path(os.getenv("TRAVELOKI_SEED_CSV", str(_DATA_DIR / "attractions.csv")))
    default_center: tuple[float, float] = (3.589, 98.6735)
    default_radius_km: float = 5.0


DEFAULT_APP_CONFIG = AppConfig()


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = os.getenv("TRAVELOKI_API_URL", "http://localhost:5000")
    timeout: float = 10.0
    session_path: Path = Path(
        os.getenv("TRAVELOKI_SESSION_PATH", str(Path.home() / ".traveloki" / "session.json"))
    )


DEFAULT_CLIENT_CONFIG = ClientConfig()
