"""
Configuration management for the inference server.

Loads environment variables from .env file and provides typed access to configuration.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

ONE_MIB = 1024 * 1024


class Config:
    """Configuration class for the HTTP server."""

    # Server
    HOST = os.getenv("HOST", "127.0.0.1")
    PORT = int(os.getenv("PORT", "8080"))
    MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", str(ONE_MIB)))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # LLM Backend Configuration
    LLM_BACKEND = os.getenv("LLM_BACKEND", "stub")

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

    @classmethod
    def validate(cls) -> bool:
        """Validate that configured values are usable."""
        problems = []
        if not 0 < cls.PORT < 65536:
            problems.append(f"PORT out of range: {cls.PORT}")
        if cls.MAX_BODY_BYTES <= 0:
            problems.append(f"MAX_BODY_BYTES must be positive: {cls.MAX_BODY_BYTES}")

        if problems:
            print(f"⚠️  Invalid configuration: {'; '.join(problems)}")
            print(f"   Please fix them in .env file")
            return False

        return True


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  Bind: {Config.HOST}:{Config.PORT}")
    print(f"  Max body bytes: {Config.MAX_BODY_BYTES}")
    print(f"  LLM Backend: {Config.LLM_BACKEND}")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
