# backend configuration
# loads env vars for mongodb, jwt, bcrypt, gemini, elevenlabs

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# load .env from project root
load_dotenv(Path(__file__).parent.parent.parent / ".env")


class Settings(BaseSettings):
    # mongodb: empty uri means in-memory storage
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "friendai")
    MONGODB_CONNECT_TIMEOUT_MS: int = 5000

    # jwt auth
    JWT_SECRET: str = os.getenv("JWT_SECRET", "friendai-dev-secret-change-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7

    # password hashing cost
    BCRYPT_ROUNDS: int = 12

    # gemini (journal analysis)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    AI_TIMEOUT_SECONDS: float = 30.0

    # elevenlabs (text to speech)
    ELEVENLABS_API_KEY: str = os.getenv("ELEVENLABS_API_KEY", "")
    ELEVENLABS_VOICE_ID: str = "21m00Tcm4TlvDq8ikWAM"
    ELEVENLABS_MODEL: str = "eleven_multilingual_v2"
    TTS_TIMEOUT_SECONDS: float = 15.0
    TTS_MAX_CHARS: int = 2000

    # cors
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # "development" exposes internal error messages in 500 responses
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production")

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
