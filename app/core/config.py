# app/core/config.py
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Every key is optional (.env):
      - DATA_DIR: directory holding the ledger files
      - ORDERS_FILE / SALES_FILE / PRODUCTS_FILE: file names (or absolute paths)
      - REFRESH_INTERVAL_SECONDS: background reload period, 0 disables it
    """

    PROJECT_NAME: str = "WonderTrack POS Ledger"
    API_V1_STR: str = "/api/v1"

    # Ledger files
    DATA_DIR: str = "data"
    ORDERS_FILE: str = "orders.txt"
    SALES_FILE: str = "sales.txt"
    PRODUCTS_FILE: str = "products.txt"

    # Money
    CURRENCY_SYMBOL: str = "₱"
    DEFAULT_ITEM_PRICE: float = 45.0

    # Views
    ORDERS_PAGE_SIZE: int = 15
    SALES_PAGE_SIZE: int = 10

    REFRESH_INTERVAL_SECONDS: float = 0
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def _resolve(self, name: str) -> Path:
        path = Path(name)
        if path.is_absolute():
            return path
        return Path(self.DATA_DIR) / path

    @property
    def orders_path(self) -> Path:
        return self._resolve(self.ORDERS_FILE)

    @property
    def sales_path(self) -> Path:
        return self._resolve(self.SALES_FILE)

    @property
    def products_path(self) -> Path:
        return self._resolve(self.PRODUCTS_FILE)


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
