import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")


class Config:
    """Base configuration shared across environments."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-change-me")

    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
    OPENAI_API_BASE = os.environ.get("OPENAI_API_BASE")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL")

    ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY")
    ANTHROPIC_API_BASE = os.environ.get("ANTHROPIC_API_BASE")
    ANTHROPIC_MODEL = os.environ.get("ANTHROPIC_MODEL")

    CUSTOM_AI_API_URL = os.environ.get("CUSTOM_AI_API_URL")
    CUSTOM_AI_API_KEY = os.environ.get("CUSTOM_AI_API_KEY")

    AI_REQUEST_TIMEOUT = os.environ.get("AI_REQUEST_TIMEOUT", "60")


class TestConfig(Config):
    TESTING = True
    OPENAI_API_KEY = "sk-test-openai"
    OPENAI_API_BASE = None
    OPENAI_MODEL = None
    ANTHROPIC_API_KEY = "sk-ant-test"
    ANTHROPIC_API_BASE = None
    ANTHROPIC_MODEL = None
    CUSTOM_AI_API_URL = "http://custom-llm.test/generate"
    CUSTOM_AI_API_KEY = None
    AI_REQUEST_TIMEOUT = "5"
