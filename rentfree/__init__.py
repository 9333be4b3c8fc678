"""RENTFREE: token-holder room directory with a signed display-name registry."""

from .app import create_app
from .bootstrap import build_context
from .config import AppConfig, load_app_config

__version__ = "1.0.0"

__all__ = ["create_app", "build_context", "AppConfig", "load_app_config", "__version__"]
