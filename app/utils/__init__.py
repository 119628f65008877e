"""유틸리티 모듈."""

from .debounce import (
    Debouncer,
    Throttler,
    debounce,
    throttle,
    create_debounced_input,
)

__all__ = [
    "Debouncer",
    "Throttler",
    "debounce",
    "throttle",
    "create_debounced_input",
]
