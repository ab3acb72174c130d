"""
TUI decorators for safe action handling.
"""

import logging
from functools import wraps
from typing import Any, Callable


def require_engine(action_func: Callable[..., Any]) -> Callable[..., Any]:
    """Skip the action until the app has an engine."""

    @wraps(action_func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        if getattr(self, "engine", None) is None:
            return None
        return action_func(self, *args, **kwargs)

    return wrapper


def notify_errors(action_func: Callable[..., Any]) -> Callable[..., Any]:
    """Log failures and surface them with App.notify instead of crashing the TUI."""

    @wraps(action_func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return action_func(self, *args, **kwargs)
        except Exception as e:
            logging.exception("%s failed", action_func.__name__)
            self.notify(f"Error: {e}", severity="error")
            return None

    return wrapper
