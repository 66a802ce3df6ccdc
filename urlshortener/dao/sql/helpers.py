import functools

import sqlalchemy.exc

from urlshortener.dao.exceptions import DataStoreError, DataStoreTimeoutError


__all__ = ['handle_sql_errors', 'is_statement_timeout']

# PostgreSQL "query_canceled", raised when statement_timeout expires
QUERY_CANCELED_SQLSTATE = '57014'


def is_statement_timeout(error: sqlalchemy.exc.DBAPIError) -> bool:
    """Tell whether a DBAPI error is a cancelled (timed out) statement

    psycopg2 exposes the SQLSTATE as `pgcode`, psycopg 3 as `sqlstate`.
    """
    original = error.orig
    code = getattr(original, 'pgcode', None) or getattr(original, 'sqlstate', None)
    return code == QUERY_CANCELED_SQLSTATE


def handle_sql_errors[F](method: F) -> F:
    """Wrap database-interacting DAO methods to translate SQLAlchemy errors

    Args:
        method (Callable[..., Any]):
            DAO method performing SQL statements which may raise sqlalchemy.exc.SQLAlchemyError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreTimeoutError on expired statement or pool
            timeouts and DataStoreError on any other database failure.

    Example:
        >>> @handle_sql_errors
        ... def count(self):
        ...     with self.engine.connect() as conn:
        ...         return conn.execute(select(func.count()).select_from(urls)).scalar_one()
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except sqlalchemy.exc.TimeoutError as e:
            raise DataStoreTimeoutError(f'Timed out waiting for a connection to {self.database}.') from e
        except sqlalchemy.exc.DBAPIError as e:
            if is_statement_timeout(e):
                raise DataStoreTimeoutError(f'Statement timed out on {self.database}.') from e
            raise DataStoreError(f'Database error on {self.database}: {type(e.orig).__name__}.') from e
        except sqlalchemy.exc.SQLAlchemyError as e:
            raise DataStoreError(f'Database error on {self.database}: {type(e).__name__}.') from e

    return wrapper
