"""
registry.py

Named-builder registry used by the track factory.

Builders are zero-or-more-keyword callables returning a fresh object. Lookups
are deterministic and names are kept sorted for listing.
"""

from __future__ import annotations

from typing import Callable, Dict, Generic, TypeVar


T = TypeVar("T")


class Registry(Generic[T]):
    """
    String-keyed registry of builders.

    Parameters
    ----------
    kind : str
        Human-readable label used in error messages (e.g. ``"track"``).
    """

    def __init__(self, kind: str = "builder") -> None:
        self._kind: str = kind
        self._builders: Dict[str, Callable[..., T]] = {}

    # ------------------------------------------------------------

    def register(self, name: str, builder: Callable[..., T]) -> None:
        """
        Register a builder under a unique name.

        Raises
        ------
        ValueError
            If the name is empty or already taken.
        """
        if not name:
            raise ValueError(f"{self._kind} name must be non-empty.")
        if name in self._builders:
            raise ValueError(f"{self._kind.capitalize()} '{name}' already registered.")

        self._builders[name] = builder

    # ------------------------------------------------------------

    def create(self, name: str, **kwargs) -> T:
        """
        Build a new instance.

        Raises
        ------
        ValueError
            If the name is unknown.
        """
        try:
            builder = self._builders[name]
        except KeyError:
            raise ValueError(
                f"Unknown {self._kind} '{name}'. Available: {', '.join(self.available)}"
            ) from None

        return builder(**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._builders.keys())
