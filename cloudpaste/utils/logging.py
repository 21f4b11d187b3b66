"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` in each entry point (Lambda package
`__init__.py`, worker `main()`) before any other logging is done.

Logging format:
{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "cloudpaste.services.cleanup",
    "message": "Sweep finished.",
    "deleted": 3
}
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from cloudpaste.constants import ENV


class JsonFormatter(logging.Formatter):
    """One JSON object per record, `extra` fields included"""

    # Attributes every LogRecord carries; anything else came in through `extra`
    STANDARD_ATTRS = frozenset(vars(logging.LogRecord('', logging.INFO, '', 0, '', None, None))) | {'message', 'asctime'}

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z')

        log = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in self.STANDARD_ATTRS:
                log[key] = value

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        # Exceptions and datetimes passed through `extra` fall back to str()
        return json.dumps(log, default=str)


def initialize_logging() -> None:
    log_level = os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
            'loggers': {
                # APScheduler logs every job run at INFO
                'apscheduler': {'level': 'WARNING'},
            },
        }
    )
