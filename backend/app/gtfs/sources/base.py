from abc import ABC, abstractmethod


class BaseSource(ABC):
    name: str = "base"

    @abstractmethod
    def fetch_tables(self) -> dict[str, str]:
        """
        Return raw GTFS table texts keyed by file name (e.g. "trips.txt").
        Raise LoadError when the source cannot supply the required tables.
        """
        raise NotImplementedError
