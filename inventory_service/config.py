from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Inventory Service"
    DATABASE_URL: str = "sqlite:///./inventory.db"
    LOG_LEVEL: str = "INFO"

    # Products service (source of truth for product identity and price)
    PRODUCTS_SERVICE_URL: str = "http://localhost:8001"
    PRODUCTS_SERVICE_API_KEY: str = ""
    PRODUCTS_SERVICE_TIMEOUT: float = 5.0  # seconds
    PRODUCTS_SERVICE_RETRIES: int = 3  # connection retries only

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    model_config = {"env_file": ".env", "env_prefix": "INVENTORY_", "extra": "ignore"}


settings = Settings()
