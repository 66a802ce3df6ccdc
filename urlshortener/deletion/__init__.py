from urlshortener.deletion.deletion_queue import DeletionQueue


__all__ = ['DeletionQueue']
