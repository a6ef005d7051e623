"""Domain services."""

from rctservers.core.domain.services.server_list import ServerList

__all__ = ["ServerList"]
