"""SQLAlchemy Core schema of the database backend

Only non-deleted rows take part in URL uniqueness (partial unique index), so a
tombstoned URL can be shortened again under a new id.
"""

from sqlalchemy import MetaData, Table, Column, Index, Integer, Text, Boolean, false


metadata = MetaData()

urls = Table(
    'urls',
    metadata,
    Column('id', Integer, primary_key=True),
    Column('original_url', Text, nullable=False),
    Column('added_by', Text, nullable=False),
    Column('is_deleted', Boolean, nullable=False, server_default=false()),
    Index('ix_urls_added_by', 'added_by'),
    # Never reuse ids of deleted rows on SQLite
    sqlite_autoincrement=True,
)

Index(
    'uq_urls_original_url_live',
    urls.c.original_url,
    unique=True,
    postgresql_where=urls.c.is_deleted == false(),
    sqlite_where=urls.c.is_deleted == false(),
)
