"""
Protocol for the design tool's variable API.

The exporter only reads collections and variables, plus one write used to
annotate variables with their CSS syntax in the design tool's own UI.
"""

from typing import List, Optional, Protocol, runtime_checkable
from abc import abstractmethod

from ..models import Variable, VariableCollection


@runtime_checkable
class VariableSource(Protocol):
    """Read access to the design tool's variable graph."""

    @abstractmethod
    async def list_collections(self) -> List[VariableCollection]:
        """
        Return every local variable collection.

        Example:
            >>> collections = await source.list_collections()
            >>> print([c.name for c in collections])
        """
        ...

    @abstractmethod
    async def get_variable(self, variable_id: str) -> Optional[Variable]:
        """
        Fetch one variable by id.

        Returns:
            The variable, or None when no variable has this id.
        """
        ...

    @abstractmethod
    async def set_code_syntax(self, variable_id: str, platform: str, syntax: str) -> None:
        """
        Annotate a variable with its code syntax for the given platform.

        This only affects the design tool's developer-mode display; it is not
        part of the published stylesheet.
        """
        ...
