"""
Index Writer

Transaction contract between the ingestion core and the index engine, plus
an in-memory implementation used for QA runs and tests.

A writer is Idle until ``begin_ingestion`` opens a transaction. Submitting
while Idle raises ``InvalidIngestionState`` and changes nothing.
``commit`` and ``abort`` close the transaction.
"""

import threading
from abc import ABC, abstractmethod
from typing import List

import pandas as pd
import structlog

from ..errors import InvalidIngestionState
from .s2_cells import cell_center
from .schema import PointOfInterest, SchemafiedPoi


class IndexWriter(ABC):
    """
    Abstract transactional index writer.

    Backends report engine failures as ``IndexWriterError``; state violations
    raise ``InvalidIngestionState``.
    """

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True while a write transaction is open."""

    @abstractmethod
    def begin_ingestion(self) -> None:
        pass

    @abstractmethod
    def submit(self, poi: SchemafiedPoi) -> None:
        pass

    @abstractmethod
    def commit(self) -> int:
        pass

    @abstractmethod
    def abort(self) -> None:
        pass


class InMemoryIndexWriter(IndexWriter):
    """
    Index writer that keeps committed documents in memory.

    Submissions are buffered per transaction and only become visible in
    ``documents`` after ``commit``.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self._active = False
        self._pending: List[SchemafiedPoi] = []
        self._committed: List[SchemafiedPoi] = []

        self.logger = structlog.get_logger(writer_type=self.__class__.__name__)

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def documents(self) -> List[SchemafiedPoi]:
        with self.lock:
            return list(self._committed)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def begin_ingestion(self) -> None:
        with self.lock:
            if self._active:
                raise InvalidIngestionState("An ingestion transaction is already active")
            self._active = True
            self._pending = []
        self.logger.info("Ingestion transaction started")

    def submit(self, poi: SchemafiedPoi) -> None:
        with self.lock:
            if not self._active:
                raise InvalidIngestionState("Cannot submit a POI without an active ingestion transaction")
            self._pending.append(poi)

    def commit(self) -> int:
        with self.lock:
            if not self._active:
                raise InvalidIngestionState("No active ingestion transaction to commit")
            count = len(self._pending)
            self._committed.extend(self._pending)
            self._pending = []
            self._active = False
        self.logger.info("Ingestion transaction committed", documents=count)
        return count

    def abort(self) -> None:
        with self.lock:
            if not self._active:
                raise InvalidIngestionState("No active ingestion transaction to abort")
            discarded = len(self._pending)
            self._pending = []
            self._active = False
        self.logger.warning("Ingestion transaction aborted", discarded=discarded)

    def points_of_interest(self) -> List[PointOfInterest]:
        """Committed documents as public records located at their cell centre."""
        points = []
        for document in self.documents:
            lat, lng = cell_center(document.s2cell)
            points.append(PointOfInterest.from_tags(lat, lng, document.tags))
        return points

    def to_dataframe(self) -> pd.DataFrame:
        """Committed documents as a DataFrame for inspection."""
        rows = []
        for document in self.documents:
            lat, lng = cell_center(document.s2cell)
            rows.append({
                's2cell': document.s2cell,
                's2cell_parents': document.s2cell_parents,
                'content': document.content,
                'tags': document.tags,
                'lat': lat,
                'lng': lng,
            })
        return pd.DataFrame(rows, columns=['s2cell', 's2cell_parents', 'content', 'tags', 'lat', 'lng'])
