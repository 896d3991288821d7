from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Products Service"
    DATABASE_URL: str = "sqlite:///./products.db"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "PRODUCTS_", "extra": "ignore"}


settings = Settings()
