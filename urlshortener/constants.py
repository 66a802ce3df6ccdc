from enum import StrEnum


class Timeout:
    """Timeouts in seconds."""

    # Per-query deadline for database and Redis calls
    QUERY = 1.0
    # Connection establishment deadline
    CONNECT = 1.0


class DeletionDefaults:
    """Default deletion pipeline policy."""

    BATCH_SIZE = 10  # Flush as soon as this many ids are buffered
    WINDOW = 10.0  # Flush whatever is buffered every WINDOW seconds
    QUEUE_SIZE = 1_000  # Bound of the producer -> worker queue


# Maximum number of rows in one multi-row INSERT statement
SQL_INSERT_CHUNK_SIZE = 1_000

# Suffix of the temporary snapshot file written during shutdown
SNAPSHOT_TMP_SUFFIX = '.new'

DEFAULT_BASE_URL = 'http://localhost:8080/'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        LOG_LEVEL = 'LOG_LEVEL'
        LOG_FILE = 'LOG_FILE'
        BASE_URL = 'BASE_URL'

    class Database(StrEnum):
        DSN = 'DATABASE_DSN'
        TIMEOUT = 'DATABASE_TIMEOUT'
        CONNECT_TIMEOUT = 'DATABASE_CONNECT_TIMEOUT'

    class Redis(StrEnum):
        HOST = 'REDIS_HOST'
        PORT = 'REDIS_PORT'
        DB = 'REDIS_DB'
        USERNAME = 'REDIS_USERNAME'
        PASSWORD = 'REDIS_PASSWORD'  # noqa: S105
        TIMEOUT = 'REDIS_TIMEOUT'

    class File(StrEnum):
        STORAGE_PATH = 'FILE_STORAGE_PATH'

    class Deletion(StrEnum):
        BATCH_SIZE = 'DELETE_BATCH_SIZE'
        WINDOW = 'DELETE_BATCH_WINDOW'
        QUEUE_SIZE = 'DELETE_QUEUE_SIZE'
