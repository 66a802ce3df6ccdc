"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` at process startup, before any other
logging is done.

Every record is rendered as one JSON object per line. Values passed through
`extra=` become top-level keys (camelCase by convention):

    >>> logger.info('Flushed deletion batch.', extra={'batchSize': 10})
    {"timestamp": "2025-12-26T12:00:00.000Z", "level": "INFO", "logger": "urlshortener.deletion.deletion_queue", "message": "Flushed deletion batch.", "batchSize": 10}
"""

import json
import logging
import logging.config
from datetime import datetime, UTC


# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    """Render LogRecords, including their extras, as JSON lines"""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        log = {
            'timestamp': created.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        log.update((key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        # default=str: extras may be paths, enums or exceptions
        return json.dumps(log, ensure_ascii=False, default=str)


def initialize_logging(log_level: str = 'INFO', log_file: str | None = None) -> None:
    """Route the root logger through JsonFormatter

    Args:
        log_level (str):
            Root logger level name, e.g. 'DEBUG'.
        log_file (str | None):
            Also append log lines to this file when given.
    """
    handlers = {'stdout': {'class': 'logging.StreamHandler', 'formatter': 'json', 'stream': 'ext://sys.stdout'}}
    if log_file:
        handlers['file'] = {'class': 'logging.FileHandler', 'formatter': 'json', 'filename': log_file, 'encoding': 'utf-8'}

    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'json': {'()': JsonFormatter}},
            'handlers': handlers,
            'root': {'level': log_level.upper(), 'handlers': list(handlers)},
        }
    )
