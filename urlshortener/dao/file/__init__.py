from urlshortener.dao.file.snapshot import encode_snapshot, decode_snapshot
from urlshortener.dao.file.short_url_file_dao import ShortURLFileDAO


__all__ = [
    'encode_snapshot',
    'decode_snapshot',
    'ShortURLFileDAO',
]
