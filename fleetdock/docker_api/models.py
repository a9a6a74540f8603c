"""Упрощённые структуры данных для описания объектов Docker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True, slots=True)
class ContainerRecord:
    """Минимальное представление контейнера, полученное от daemon."""

    identifier: str  # полный идентификатор контейнера
    image: str  # строка образа в том виде, в каком её вернул daemon
    running: bool = False
    started_at: Optional[str] = None
    name: str = ""
    status: str = ""

    @classmethod
    def from_summary(cls, attrs: Dict[str, Any]) -> "ContainerRecord":
        """Строит запись из элемента ответа docker ps."""

        names = attrs.get("Names") or []
        return cls(
            identifier=str(attrs.get("Id", "")),
            image=str(attrs.get("Image", "")),
            running=str(attrs.get("State", "")).lower() == "running",
            name=names[0].lstrip("/") if names else "",
            status=str(attrs.get("Status", "")),
        )

    @classmethod
    def from_inspect(cls, attrs: Dict[str, Any]) -> "ContainerRecord":
        """Строит запись из результата docker inspect."""

        state = attrs.get("State") or {}
        config = attrs.get("Config") or {}
        return cls(
            identifier=str(attrs.get("Id", "")),
            image=str(config.get("Image") or attrs.get("Image", "")),
            running=bool(state.get("Running", False)),
            started_at=state.get("StartedAt"),
            name=str(attrs.get("Name", "")).lstrip("/"),
            status=str(state.get("Status", "")),
        )
