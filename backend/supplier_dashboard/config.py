# backend/supplier_dashboard/config.py
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List

PACKAGE_DIR = Path(__file__).resolve().parent        # backend/supplier_dashboard
DATA_DIR = PACKAGE_DIR / "data"                       # backend/supplier_dashboard/data

DEFAULT_DB_URL = f"sqlite:///{(DATA_DIR / 'app.db').as_posix()}"
DEFAULT_GRAPHQL_URL = "https://api.adil-baba.com/graphql"
DEFAULT_SUPPLIER_API_BASE_URL = "https://api.adil-baba.com/api"


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    database_url: str = DEFAULT_DB_URL
    auto_bootstrap_db: bool = True
    analytics_graphql_url: str = DEFAULT_GRAPHQL_URL
    supplier_api_base_url: str = DEFAULT_SUPPLIER_API_BASE_URL
    upstream_timeout_s: float = 15.0
    mock_data_dir: Path = DATA_DIR / "mocks"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cors_allow_origins=_split_csv(os.getenv("CORS_ALLOW_ORIGINS", "*")) or ["*"],
            database_url=os.getenv("DATABASE_URL", DEFAULT_DB_URL),
            auto_bootstrap_db=os.getenv("AUTO_BOOTSTRAP_DB", "1") == "1",
            analytics_graphql_url=os.getenv("ANALYTICS_GRAPHQL_URL", DEFAULT_GRAPHQL_URL),
            supplier_api_base_url=os.getenv("SUPPLIER_API_BASE_URL", DEFAULT_SUPPLIER_API_BASE_URL).rstrip("/"),
            upstream_timeout_s=float(os.getenv("UPSTREAM_TIMEOUT_S", "15")),
            mock_data_dir=Path(os.getenv("MOCK_DATA_DIR", str(DATA_DIR / "mocks"))),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
