"""Server configuration."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_FOLDER = Path("./specs")
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9091


class ServerConfig(BaseModel):
    """Settings for one specviewer server."""

    folder: Path = DEFAULT_FOLDER
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    shutdown_grace: float = Field(default=5.0, gt=0)  # seconds
    watch: bool = True

    @field_validator("folder")
    @classmethod
    def _resolve_folder(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @property
    def url(self) -> str:
        host = "localhost" if self.host in ("127.0.0.1", "0.0.0.0") else self.host
        return f"http://{host}:{self.port}"
