"""日志初始化。"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """为 ``curricula`` 日志器挂载单个输出 handler，重复调用不会重复挂载。"""

    logger = logging.getLogger("curricula")
    logger.setLevel(level.upper())
    if not any(getattr(h, "_curricula_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._curricula_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
