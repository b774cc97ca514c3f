"""
JSON document store backed by a single file.

The file is loaded on init() and rewritten atomically on every update(), so a
crash mid-write leaves the previous content intact.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from devcert.fsutil import exists, read_file, write_file_atomic
from devcert.logging_config import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class JsonDocument(Generic[ModelT]):
    """A pydantic model persisted as JSON at a fixed path."""

    model: ClassVar[type[BaseModel]]

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: ModelT | None = None

    @property
    def data(self) -> ModelT:
        if self._data is None:
            raise RuntimeError(f"{type(self).__name__} not initialized; call init() first")
        return self._data

    @property
    def loaded(self) -> bool:
        return self._data is not None

    async def init(self) -> None:
        """Load the document from disk, creating a default one if absent."""
        if await exists(self.path):
            raw = await read_file(self.path)
            try:
                self._data = self.model.model_validate_json(raw)  # type: ignore[assignment]
                return
            except ValidationError as e:
                logger.warning(
                    "Discarding unreadable state file",
                    path=str(self.path),
                    errors=e.error_count(),
                )

        self._data = self.model()  # type: ignore[assignment]
        await self._save()

    async def update(self, **changes: Any) -> None:
        """Merge changes into the document and persist it."""
        merged = {**self.data.model_dump(), **changes}
        self._data = self.model.model_validate(merged)  # type: ignore[assignment]
        await self._save()

    async def _save(self) -> None:
        await write_file_atomic(self.path, self.data.model_dump_json(indent=2).encode())
