"""
Poker circuit settings
"""
from typing import List

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

load_dotenv()


class SupabaseConfig(BaseSettings):
    """Supabase settings"""

    supabase_url: str = Field(default="", description="Supabase Project URL")
    supabase_key: str = Field(default="", description="Supabase service or anon key")

    class Config:
        env_prefix = ""
        case_sensitive = False


class ServerConfig(BaseSettings):
    """API server settings"""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    cors_origins: List[str] = Field(default=["*"], description="Allowed CORS origins")

    # Logging
    log_level: str = Field(default="INFO", description="stderr log level")
    log_dir: str = Field(default="logs", description="Rotated log file directory")

    class Config:
        env_prefix = "CIRCUIT_"
        case_sensitive = False


# Global settings instances
supabase_config = SupabaseConfig()
server_config = ServerConfig()
