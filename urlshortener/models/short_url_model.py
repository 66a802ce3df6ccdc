from dataclasses import dataclass, replace

from urlshortener.types import SnapshotRow


@dataclass(frozen=True)
class ShortURLModel:
    """Represent a shortened URL record.

    Attributes:
        id (int):
            Positive short identifier assigned by the data store on insertion.
        original_url (str):
            The original long URL that the short id redirects to.
        added_by (str):
            Opaque identity of the anonymous owner who shortened the URL.
        is_deleted (bool):
            Tombstone flag. Deleted records are still returned by id lookups,
            but are excluded from duplicate detection and owner listings.

    Example:
        >>> url = ShortURLModel(id=1, original_url='https://ya.ru', added_by='u1')
        >>> url.is_deleted
        False
        >>> url.to_row()
        [1, 'https://ya.ru', 'u1', False]
        >>> url.tombstoned().is_deleted
        True
    """

    id: int
    original_url: str
    added_by: str
    is_deleted: bool = False

    def tombstoned(self) -> 'ShortURLModel':
        """Return a copy of this record marked as deleted."""
        return replace(self, is_deleted=True)

    def to_row(self) -> SnapshotRow:
        """Encode as a compact positional row (field names are omitted on disk)."""
        return [self.id, self.original_url, self.added_by, self.is_deleted]

    @classmethod
    def from_row(cls, row: list) -> 'ShortURLModel':
        """Decode a positional row produced by to_row()

        Rows written by older releases have three fields and no deletion
        flag; those are read back as non-deleted.

        Raises:
            ValueError:
                If the row has the wrong shape or field types.
        """
        if not isinstance(row, list) or len(row) not in (3, 4):
            raise ValueError(f'Expected a row of 3 or 4 fields (given: {row!r}).')

        short_url_id, original_url, added_by, *rest = row
        is_deleted = rest[0] if rest else False

        # bool is a subclass of int, reject it explicitly for the id
        if not isinstance(short_url_id, int) or isinstance(short_url_id, bool) or short_url_id <= 0:
            raise ValueError(f'Row id must be a positive integer (given: {short_url_id!r}).')
        if not isinstance(original_url, str) or not isinstance(added_by, str):
            raise ValueError(f'Row URL and owner must be strings (given: {row!r}).')
        if not isinstance(is_deleted, bool):
            raise ValueError(f'Row deletion flag must be a boolean (given: {is_deleted!r}).')

        return cls(id=short_url_id, original_url=original_url, added_by=added_by, is_deleted=is_deleted)
