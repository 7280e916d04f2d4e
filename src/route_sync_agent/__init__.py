"""Route sync agent runtime helpers."""

from .config import AgentConfig, load_config  # noqa: F401
from .opts import load_oslo_config  # noqa: F401

__all__ = [
    "AgentConfig",
    "load_config",
    "load_oslo_config",
]
