"""Сопоставление образов контейнеров с целевым образом."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fleetdock.fleet.models import TargetImage

LOGGER = logging.getLogger(__name__)

DEFAULT_TAGS = ("", "latest")


class ImageReferenceError(ValueError):
    """Строка образа не укладывается в форму [registry:port/]repository[:tag]."""


@dataclass(frozen=True, slots=True)
class ImageReference:
    """Нормализованная пара (repository, tag)."""

    repository: str
    tag: str = ""


def parse_image_reference(reported: str) -> ImageReference:
    """Разбирает строку образа, которую вернул daemon.

    Допускается ноль, одно или два двоеточия. Форма с двумя двоеточиями
    (registry:5000/name:tag) сворачивается так, что host:port остаётся частью
    repository.
    """

    parts = reported.split(":")
    if len(parts) == 3:
        parts = [f"{parts[0]}:{parts[1]}", parts[2]]
    if len(parts) > 3 or not parts[0]:
        raise ImageReferenceError(f"Malformed image reference: {reported!r}")
    if len(parts) == 1:
        return ImageReference(repository=parts[0])
    return ImageReference(repository=parts[0], tag=parts[1])


def matches(reported: str, target: TargetImage) -> bool:
    """Решает, относится ли контейнер с образом reported к target."""

    try:
        reference = parse_image_reference(reported)
    except ImageReferenceError:
        LOGGER.debug("Skipping container with malformed image %r", reported)
        return False

    if reference.repository != target.name:
        return False
    if not target.tag:
        return reference.tag in DEFAULT_TAGS
    return reference.tag == target.tag
