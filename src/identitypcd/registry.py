"""
Type-dispatching registry for heterogeneous PCD collections.

Each registered package handles exactly one type string. Unknown types
verify as False and fail to deserialize, so a collection can hold PCDs
from packages this process does not know about.
"""

import logging
from typing import Any, Dict, Iterable, Protocol, Union

from .exceptions import MalformedPCDError
from .serializer import peek_type


logger = logging.getLogger(__name__)


class PCDPackage(Protocol):
    name: str

    async def verify(self, pcd: Any) -> bool:
        ...

    def deserialize(self, data: Union[bytes, str]) -> Any:
        ...


class PCDRegistry:
    """Maps PCD type strings to the package that handles them."""

    def __init__(self, packages: Iterable[PCDPackage] = ()):
        self._packages: Dict[str, PCDPackage] = {}
        for package in packages:
            self.register(package)

    def register(self, package: PCDPackage) -> None:
        """
        Register a package under its name.

        Raises:
            ValueError: If a package with the same name is already registered.
        """
        if package.name in self._packages:
            raise ValueError(f"PCD package {package.name!r} is already registered")
        self._packages[package.name] = package

    def get(self, pcd_type: str) -> PCDPackage:
        """Return the package for pcd_type; KeyError if unknown."""
        return self._packages[pcd_type]

    def __contains__(self, pcd_type: object) -> bool:
        return pcd_type in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    async def verify(self, pcd: Any) -> bool:
        """Verify a PCD with the package registered for its type."""
        package = self._packages.get(getattr(pcd, "type", None))
        if package is None:
            logger.debug("No package registered for PCD type %r", getattr(pcd, "type", None))
            return False
        return await package.verify(pcd)

    def deserialize(self, data: Union[bytes, str]) -> Any:
        """
        Decode a serialized PCD of any registered type.

        Raises:
            MalformedPCDError: If the envelope is unreadable or its type
                is not registered.
        """
        pcd_type = peek_type(data)
        package = self._packages.get(pcd_type)
        if package is None:
            raise MalformedPCDError(f"Unknown PCD type {pcd_type!r}")
        return package.deserialize(data)
