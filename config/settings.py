import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()

MAX_UPLOAD_BYTES = 2 * 1024 * 1024


class PortalConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    registry_url: str = Field(default="http://localhost:3001", description="Base URL of the registry API")
    registry_token: Optional[str] = Field(default=None, description="Bearer token sent on registration")
    registry_host: str = "0.0.0.0"
    registry_port: int = 3001
    request_timeout: float = 10.0
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    env: str = "development"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "PortalConfig":
        return cls(
            registry_url=os.getenv("REGISTRY_URL", "http://localhost:3001"),
            registry_token=os.getenv("REGISTRY_TOKEN"),
            registry_host=os.getenv("REGISTRY_HOST", "0.0.0.0"),
            registry_port=int(os.getenv("REGISTRY_PORT", "3001")),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10")),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(MAX_UPLOAD_BYTES))),
            env=os.getenv("ENV", "development").lower(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


class PostgresConfig(BaseModel):
    host: str
    port: int
    dbname: str
    user: str
    password: str

    @classmethod
    def from_env(cls) -> "PostgresConfig":
        return cls(
            host=os.environ["PG_HOST"],
            port=int(os.environ["PG_PORT"]),
            dbname=os.environ["PG_DB"],
            user=os.environ["PG_USER"],
            password=os.getenv("PG_PASSWORD", ""),
        )

    @staticmethod
    def is_configured() -> bool:
        return all(os.getenv(k) for k in ("PG_HOST", "PG_PORT", "PG_DB", "PG_USER"))

    def connect_kwargs(self) -> dict:
        return {
            "host": self.host,
            "port": self.port,
            "dbname": self.dbname,
            "user": self.user,
            "password": self.password,
        }
