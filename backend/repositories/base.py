from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class RecordRepository(ABC):
    """Remote collection of JSON records addressed by ``_id``."""

    @abstractmethod
    def list(self) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def get(self, record_id: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    def create(self, record: Dict[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    def update(self, record_id: str, record: Dict[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    def delete(self, record_id: str) -> bool: ...
