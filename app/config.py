"""
Application configuration
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    API_TITLE: str = "solc-compile API"
    API_VERSION: str = "0.1.0"

    # Compiler
    SOLC_EXECUTABLE: str | None = None  # None → solc on PATH
    SOLC_TIMEOUT: float = 300  # seconds
    SOLC_PROBE_VERSION: bool = True

    # Filesystem
    SOLC_WORKSPACE: str = "/workspace"  # project roots are resolved under here
    ARTIFACTS_PATH: str = "/files/artifacts"

    @property
    def receipts_root(self) -> str:
        """Where compile receipts are written"""
        return f"{self.ARTIFACTS_PATH}/solc"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
