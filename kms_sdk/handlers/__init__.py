from abc import ABC, abstractmethod
from typing import Any, Dict


class OperationHandlerInterface(ABC):
    """
    Abstract base class for operation handlers
    """

    @abstractmethod
    def prepare(self, *args: Any, **kwargs: Any) -> Any:
        """
        Validate a request and convert its payload before any remote call
        To be implemented by the subclass
        """
        raise NotImplementedError("prepare method not implemented")

    @abstractmethod
    async def invoke(self, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        """
        Perform the remote call for a prepared request
        To be implemented by the subclass
        """
        raise NotImplementedError("invoke method not implemented")
