from urlshortener.models.short_url_model import ShortURLModel
from urlshortener.models.batch_model import BatchRequestRecord, BatchResponseRecord


__all__ = [
    'ShortURLModel',
    'BatchRequestRecord',
    'BatchResponseRecord',
]
