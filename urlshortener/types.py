from typing import Annotated

from beartype.vale import Is


# Runtime-validated aliases for DAO arguments (checked by @beartype)
NonEmptyStr = Annotated[str, Is[lambda text: len(text) > 0]]

# One snapshot row: [id, original_url, added_by, is_deleted]
type SnapshotRow = list[int | str | bool]
