from urlshortener.dao.sql.tables import metadata, urls
from urlshortener.dao.sql.short_url_sql_dao import ShortURLSQLDAO, create_sql_engine


__all__ = [
    'metadata',
    'urls',
    'ShortURLSQLDAO',
    'create_sql_engine',
]
