"""
Delivery boundary: hands finished byte buffers to the host as downloads.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..exceptions import DeliveryFailure


logger = logging.getLogger(__name__)


MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".png": "image/png",
}


def media_type_for(filename: str) -> str:
    return MEDIA_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")


@dataclass(frozen=True)
class Delivery:
    """One finished download"""
    filename: str  # already sanitised
    data: bytes
    media_type: str

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class DeliveryAdapter(ABC):
    """Target that receives finished downloads"""

    @abstractmethod
    def deliver(self, delivery: Delivery) -> None:
        """Hand the delivery to the host; raise DeliveryFailure on error"""
        pass


class InMemoryDeliveryAdapter(DeliveryAdapter):
    """Keeps deliveries in memory (host reads them back)"""

    def __init__(self, max_kept: Optional[int] = 100):
        self.max_kept = max_kept
        self.deliveries: List[Delivery] = []

    def deliver(self, delivery: Delivery) -> None:
        self.deliveries.append(delivery)
        if self.max_kept is not None and len(self.deliveries) > self.max_kept:
            del self.deliveries[: len(self.deliveries) - self.max_kept]

    @property
    def last(self) -> Optional[Delivery]:
        return self.deliveries[-1] if self.deliveries else None


class DirectoryDeliveryAdapter(DeliveryAdapter):
    """Writes each delivery into a directory"""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def deliver(self, delivery: Delivery) -> None:
        target = self.directory / Path(delivery.filename).name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(delivery.data)
        except OSError as e:
            raise DeliveryFailure(f"Could not write {target}: {e}") from e
        logger.debug(f"Delivery written to {target}")
