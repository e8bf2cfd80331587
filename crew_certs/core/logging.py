import logging
from pythonjsonlogger.json import JsonFormatter


def configure_logging(level: str = "INFO", service: str = "certificate-tracker") -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    if root_logger.handlers:
        return
    handler = logging.StreamHandler()
    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        static_fields={"service": service},
    )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # uvicorn ships its own plain-text handlers
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = True
