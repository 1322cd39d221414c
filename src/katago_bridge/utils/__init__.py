# Utils package
from katago_bridge.utils.loggers import DEFAULT_LOGGER, get_logger

__all__ = ["DEFAULT_LOGGER", "get_logger"]
