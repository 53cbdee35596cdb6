#!/usr/bin/env python3
"""Capability interfaces implemented by fileiter components.

An ingestion pipeline drives two kinds of component:

- EntityProcessor: produces records one at a time for a configured entity
- DataSource: turns a query string into a readable stream

Example:
    >>> processor = FileIteratorEntityProcessor()
    >>> processor.init(context)
    >>> for record in processor:
    ...     print(record["fileAbsolutePath"])
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Mapping, Optional, TextIO

from fileiter.infrastructure.context import EntityContext

Record = Dict[str, Any]


class EntityProcessor(ABC):
    """Pull-style record producer for one entity.

    Subclasses must implement:
    - next_record(): Return the next record, or None at end of data

    Optional overrides:
    - init(): Read configuration from the context
    - destroy(): Release per-run state
    """

    def __init__(self):
        self.context: Optional[EntityContext] = None

    def init(self, context: EntityContext) -> None:
        """Bind the processor to an entity context.

        Args:
            context: Context of the configured entity

        Raises:
            ConfigurationError: If the entity configuration is invalid
        """
        self.context = context

    @abstractmethod
    def next_record(self) -> Optional[Record]:
        """Return the next record, or None when there are no more."""

    def destroy(self) -> None:
        """Release per-run state. The next call to next_record() starts over."""

    def __iter__(self) -> Iterator[Record]:
        while True:
            record = self.next_record()
            if record is None:
                return
            yield record


class DataSource(ABC):
    """Resolves queries to readable text streams.

    Streams returned by get_data() belong to the caller, who must close
    them.
    """

    def init(self, context: EntityContext, properties: Mapping[str, Any]) -> None:
        """Configure the data source.

        Args:
            context: Context the data source is attached to
            properties: Data source properties as configured
        """

    @abstractmethod
    def get_data(self, query: str) -> TextIO:
        """Open a stream for the given query.

        Raises:
            DataSourceError: If nothing readable exists for the query
        """

    def close(self) -> None:
        """Release resources held across calls."""

    def __enter__(self) -> "DataSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
