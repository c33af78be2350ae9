"""Mirror selectors decide the order in which repositories are tried."""

import typing as t
from abc import ABC, abstractmethod

from ..domain.coordinates import Repository


class BaseMirrorSelector(ABC):
    """Orders the repository list handed to the enquirer."""

    @abstractmethod
    def order(self, repositories: t.Sequence[Repository]) -> list[Repository]:
        """Return repositories in the order they should be tried."""


class DeclarationOrderMirrorSelector(BaseMirrorSelector):
    """Keeps declaration order, dropping duplicate URLs."""

    def order(self, repositories: t.Sequence[Repository]) -> list[Repository]:
        seen: set[str] = set()
        ordered = []
        for repository in repositories:
            if repository.url not in seen:
                seen.add(repository.url)
                ordered.append(repository)
        return ordered


class PriorityMirrorSelector(DeclarationOrderMirrorSelector):
    """Higher priority first; declaration order among equal priorities."""

    def order(self, repositories: t.Sequence[Repository]) -> list[Repository]:
        return sorted(super().order(repositories), key=lambda repo: -repo.priority)
