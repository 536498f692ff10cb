"""Core application components: configuration and quoting sessions."""

from avellaneda.core.config import AppConfig, load_config
from avellaneda.core.session import AsyncQuotingSession, QuotingSession

__all__ = ["AppConfig", "AsyncQuotingSession", "QuotingSession", "load_config"]
