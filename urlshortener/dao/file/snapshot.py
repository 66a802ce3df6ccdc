"""Compact JSON encoding of the file store snapshot

The whole store is one JSON array of positional rows, field names omitted
to save space:

    [[1,"https://ya.ru","u1",false],[2,"https://google.com","u1",true]]

Functions:
    encode_snapshot(rows) -> str
    decode_snapshot(text) -> list[ShortURLModel]
"""

import json
from collections.abc import Iterable

from urlshortener.models import ShortURLModel
from urlshortener.dao.exceptions import DataStoreError


def encode_snapshot(rows: Iterable[ShortURLModel]) -> str:
    """Serialize records into the snapshot format

    Example:
        >>> encode_snapshot([ShortURLModel(id=1, original_url='https://ya.ru', added_by='u1')])
        '[[1,"https://ya.ru","u1",false]]'
    """
    return json.dumps([row.to_row() for row in rows], separators=(',', ':'), ensure_ascii=False)


def decode_snapshot(text: str) -> list[ShortURLModel]:
    """Parse a snapshot back into records

    An empty (or whitespace-only) file holds no records. Rows written by older
    releases without the deletion flag are accepted as non-deleted.

    Raises:
        DataStoreError:
            If the text is not a JSON array of well-formed rows.
    """
    if not text.strip():
        return []

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise DataStoreError('Malformed snapshot: content is not valid JSON.') from e

    if not isinstance(document, list):
        raise DataStoreError(f'Malformed snapshot: expected a JSON array (given type: {type(document).__name__}).')

    rows = []
    for position, item in enumerate(document):
        try:
            rows.append(ShortURLModel.from_row(item))
        except ValueError as e:
            raise DataStoreError(f'Malformed snapshot row #{position}: {e}') from e
    return rows
