"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DATABASE_URL: str
    SQL_ECHO: bool
    LOG_LEVEL: str
    ALLOW_DEV_CORS: bool
    API_TITLE: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self._database_url_set = bool(os.getenv("DATABASE_URL"))
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'reportcard.db'}")
        self.SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.API_TITLE = os.getenv("API_TITLE", "Report Card API")
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and not self._database_url_set:
            raise RuntimeError("DATABASE_URL must be set explicitly in non-dev environments")

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
