from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # MongoDB
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db_name: str = "COMPLEJOS"
    mongo_timeout_seconds: float = 10.0

    # JWT (el servicio no arranca sin secreto)
    jwt_secret: str = Field(..., min_length=1)
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"

    # App configuration
    app_title: str = "Los Complejos Backend"
    app_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
