"""Transaction grouping.

A method body is transactional when a transaction-control keyword appears
as a whole word anywhere in its comment-free text: StartTransaction, Commit,
Rollback (or their IBX `Retaining` forms) and InTransaction. Identifiers that
merely start with one, such as `Committed`, do not count. Every operation
from one transactional method shares one group id.

Group ids are deterministic: `tx-<8 hex>-<n>`, the hex part hashed from the
unit and qualified method name and `n` a per-unit counter, so repeated runs
over the same unit produce the same ids while staying unique within it.
"""

import hashlib
from collections.abc import Iterable

from .config import TRANSACTION_PATTERN
from .models import DatabaseOperation, TransactionGroup


def is_transactional(body: str) -> bool:
    return TRANSACTION_PATTERN.search(body) is not None


class TransactionIdFactory:
    """Issues group ids for one unit."""

    def __init__(self, unit_name: str):
        self.unit_name = unit_name
        self._sequence = 0

    def next_id(self, class_name: str, method_name: str) -> str:
        self._sequence += 1
        seed = f"{self.unit_name}:{class_name}.{method_name}".encode("utf-8")
        digest = hashlib.sha1(seed).hexdigest()[:8]
        return f"tx-{digest}-{self._sequence}"


def group_by_transaction(operations: Iterable[DatabaseOperation]) -> list[TransactionGroup]:
    """Cluster operations by transaction group id.

    Pure post-pass over the flat list: groups appear in order of their first
    member and take method, class and source text from that member.
    Operations without a group id are ignored.
    """
    groups: dict[str, TransactionGroup] = {}
    for op in operations:
        if not op.transaction_group_id:
            continue
        group = groups.get(op.transaction_group_id)
        if group is None:
            group = TransactionGroup(
                group_id=op.transaction_group_id,
                method_name=op.method_name,
                containing_class=op.containing_class,
                original_source_text=op.original_source_text,
            )
            groups[op.transaction_group_id] = group
        group.operations.append(op)
    return list(groups.values())
