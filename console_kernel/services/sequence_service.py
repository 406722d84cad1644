"""
SequenceService -- insertion-order numbers for store documents.

Responsibility:
    Hands out the ``seq`` value stamped on every new StoreDocument.
    Reads of a collection return children in ``seq`` order, which is
    the chronological order of the audit log.

Architecture position:
    Kernel > Services.  Called by SqlDocumentStore inside its insert
    transaction; never commits on its own.

Invariants enforced:
    - Values for one counter name strictly increase.  The next value
      comes from a locked counter row (``SELECT ... FOR UPDATE``), never
      from ``max(seq) + 1`` over the documents table.
    - An allocation rolled back with its transaction is reused.

Failure modes:
    - IntegrityError: two PostgreSQL writers created the same counter
      row at once.  The loser retries against the winner's row.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from console_kernel.logging_config import get_logger
from console_kernel.models.sequence import SequenceCounter

logger = get_logger("services.sequence")


class SequenceService:
    """Named counters within the caller's session."""

    DOCUMENT = "store_document"

    def __init__(self, session: Session):
        self._session = session

    def _counter(self, name: str, lock: bool = True) -> SequenceCounter | None:
        stmt = select(SequenceCounter).where(SequenceCounter.name == name)
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self._session.execute(stmt).scalar_one_or_none()

    def _create_counter(self, name: str) -> SequenceCounter | None:
        """Insert a counter at 1; None when another writer got there first."""
        counter = SequenceCounter(name=name, current_value=1)
        if self._session.get_bind().dialect.name == "sqlite":
            # writers are serialized on the database file
            self._session.add(counter)
            self._session.flush()
            return counter

        savepoint = self._session.begin_nested()
        try:
            self._session.add(counter)
            self._session.flush()
        except IntegrityError:
            savepoint.rollback()
            logger.debug("sequence_counter_race_retry", extra={"sequence_name": name})
            return None
        savepoint.commit()
        return counter

    def next_value(self, sequence_name: str) -> int:
        """Allocate the next value (the first one is 1)."""
        counter = self._counter(sequence_name)
        if counter is None:
            created = self._create_counter(sequence_name)
            if created is not None:
                value = created.current_value
                logger.debug(
                    "sequence_allocated",
                    extra={"sequence_name": sequence_name, "value": value},
                )
                return value
            counter = self._counter(sequence_name)
            if counter is None:
                raise RuntimeError(f"Sequence counter '{sequence_name}' vanished after insert race")

        counter.current_value += 1
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int | None:
        """The last allocated value, or None for an unused counter."""
        counter = self._counter(sequence_name, lock=False)
        return counter.current_value if counter else None
