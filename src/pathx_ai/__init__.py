#!filepath: src/pathx_ai/__init__.py
from pathx_ai.ai_service import AIService

__all__ = ["AIService"]

__version__ = "0.1.0"
