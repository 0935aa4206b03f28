from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..crop.geometry import EncodedResult


@dataclass(frozen=True)
class StoredObject:
    key: str
    url: str
    size_bytes: int


class IFileStorage(ABC):
    """Object storage that hands back a stable public URL for each upload."""

    @abstractmethod
    def upload(self, result: EncodedResult, *, folder: str = "") -> StoredObject:
        """Persist *result* under a fresh key and return where it lives"""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete the object stored under *key*; missing keys are ignored"""
        pass
