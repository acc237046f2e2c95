# recordcollector/contracts/remote.py
from typing import Any, Mapping
from abc import ABC, abstractmethod


class RemoteClient(ABC):
    """
    Boundary to the remote API: invoke a named method with a parameter object.

    Any exception raised by :meth:`invoke` is treated as transient by the
    engine and retried.
    """

    @abstractmethod
    async def invoke(self, method: str, params: Mapping[str, Any]) -> Any: ...
