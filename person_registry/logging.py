import logging
import sys

from opentelemetry import trace

try:
    from pythonjsonlogger.json import JsonFormatter  # type: ignore[import-untyped]
except ImportError:
    from pythonjsonlogger import jsonlogger  # type: ignore[import-untyped]

    JsonFormatter = jsonlogger.JsonFormatter  # type: ignore[attr-defined]


class OTelContextFilter(logging.Filter):
    """Attach service name and the active trace/span ids to each record."""

    def __init__(self, service_name: str = "person-registry") -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        ctx = trace.get_current_span().get_span_context()
        if ctx.is_valid:
            record.trace_id = format(ctx.trace_id, "032x")
            record.span_id = format(ctx.span_id, "016x")
        else:
            record.trace_id = ""
            record.span_id = ""
        return True


def configure_logging(level: str = "info", service_name: str = "person-registry") -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger()
    logger.setLevel(lvl)
    handler = logging.StreamHandler(sys.stdout)
    fmt = JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(service)s %(trace_id)s %(span_id)s %(message)s",
    )
    handler.setFormatter(fmt)
    handler.addFilter(OTelContextFilter(service_name))
    logger.handlers = [handler]
