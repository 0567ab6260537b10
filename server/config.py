"""
Server configuration loaded from environment variables.
"""
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Server configuration."""

    # Server settings
    HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("SERVER_PORT", "8080"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Game settings
    STARTING_CASH: int = int(os.getenv("STARTING_CASH", "1500"))
    MAX_PLAYERS: int = int(os.getenv("MAX_PLAYERS", "8"))
    GAME_CODE_LENGTH: int = int(os.getenv("GAME_CODE_LENGTH", "6"))
    DISCONNECT_GRACE_SECONDS: float = float(os.getenv("DISCONNECT_GRACE_SECONDS", "120"))


settings = Config()
