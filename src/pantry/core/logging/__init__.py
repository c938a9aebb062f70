from .logger import (
    clear_model_name,
    get_logger,
    get_model_name,
    log_stage,
    model_context,
    set_model_name,
    setup_logging,
)

__all__ = [
    "clear_model_name",
    "get_logger",
    "get_model_name",
    "log_stage",
    "model_context",
    "set_model_name",
    "setup_logging",
]
