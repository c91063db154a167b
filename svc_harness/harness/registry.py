import itertools
import logging
from dataclasses import dataclass
from typing import Iterator, List, Union

from ..errors import InvalidServiceIndex
from ..services.base_service import BaseService

logger = logging.getLogger("svc-harness.registry")

_registry_ids = itertools.count(1)


@dataclass(frozen=True)
class ServiceHandle:
    """Checked reference to a registered service, issued by ServiceRegistry.add."""
    index: int
    name: str
    registry_id: int


ServiceRef = Union[ServiceHandle, int]


class ServiceRegistry:
    """
    Ordered collection of services owned by a Harness.
    Step executors resolve their target through it instead of indexing directly.
    """

    def __init__(self):
        self._id = next(_registry_ids)
        self._services: List[BaseService] = []

    def add(self, service: BaseService) -> ServiceHandle:
        handle = ServiceHandle(index=len(self._services), name=service.name, registry_id=self._id)
        self._services.append(service)
        logger.info(f"Registered service: {service.name} (index={handle.index})")
        return handle

    def resolve(self, ref: ServiceRef) -> BaseService:
        if isinstance(ref, ServiceHandle):
            if ref.registry_id != self._id:
                raise InvalidServiceIndex(ref.index, len(self._services), "handle issued by another harness")
            index = ref.index
        else:
            index = ref
        # Negative indices are rejected rather than wrapped
        if not 0 <= index < len(self._services):
            raise InvalidServiceIndex(index, len(self._services))
        return self._services[index]

    def __len__(self) -> int:
        return len(self._services)

    def __iter__(self) -> Iterator[BaseService]:
        return iter(self._services)

    def __reversed__(self) -> Iterator[BaseService]:
        return reversed(self._services)
