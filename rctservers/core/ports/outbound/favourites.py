"""Favourites storage outbound port interface."""

from abc import ABC, abstractmethod

from rctservers.core.domain.models import ServerListEntry


class IFavouritesStorePort(ABC):
    """
    Outbound port for persisting favourite servers.

    Neither method raises: loading degrades to an empty list and saving
    reports failure through its return value.
    """

    @abstractmethod
    def read_favourites(self) -> list[ServerListEntry]:
        """
        Load persisted favourites.

        Returns:
            Entries flagged as favourite, without live status data
        """
        pass

    @abstractmethod
    def write_favourites(self, entries: list[ServerListEntry]) -> bool:
        """
        Replace persisted favourites.

        Args:
            entries: Entries to persist, in order

        Returns:
            True if the favourites were written
        """
        pass
