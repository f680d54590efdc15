"""Strategy selection.

The source website publishes different parliaments in different formats, so
the strategy that scrapes a task depends on the run's options. The registry
maps strategy identifiers to strategy classes; the selector turns a task name
and a ScrapeConfig into one of those identifiers.

- ``people`` selects by parliament: 36 and later (or no parliament, since
  current data is scraped far more often than historical data) use the
  complete-list strategy; earlier parliaments use the Parlinfo strategy.
- Any other task resolves to the strategy registered under the same name,
  unless a resolver has been registered for it.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator

from roster.common.exceptions import InvalidConfigError, UnknownTaskError
from roster.data_types import ScrapeConfig
from roster.strategies import (
    Parl1stTo35thStrategy,
    Parl36thToDateStrategy,
    PeopleStrategy,
)
from roster.strategies.base import PARLIAMENT_KEY

PEOPLE_TASK = "people"
MODERN_ERA_THRESHOLD = 36

Resolver = Callable[[ScrapeConfig], str]

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


class StrategyRegistry:
    """Mapping from strategy identifier to strategy class.

    Populated at startup and then frozen; a frozen registry rejects further
    registrations.

    Example::

        registry = StrategyRegistry()
        registry.register(Parl36thToDateStrategy)
        registry.freeze()
        registry.get("people_36th_to_date")
    """

    def __init__(self) -> None:
        self._strategies: dict[str, type[PeopleStrategy]] = {}
        self._frozen = False

    def register(
        self,
        strategy_class: type[PeopleStrategy],
        identifier: str | None = None,
    ) -> type[PeopleStrategy]:
        """Register a strategy class under its identifier.

        Returns the class so this can be used as a decorator.

        Raises:
            RuntimeError: If the registry is frozen.
            ValueError: If the identifier is empty or already taken.
        """
        if self._frozen:
            raise RuntimeError("Strategy registry is frozen")

        key = identifier or strategy_class.identifier
        if not key:
            raise ValueError(
                f"{strategy_class.__name__} has no strategy identifier"
            )
        if key in self._strategies:
            raise ValueError(f"Strategy '{key}' is already registered")

        self._strategies[key] = strategy_class
        return strategy_class

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(
        self, identifier: str, task_name: str | None = None
    ) -> type[PeopleStrategy]:
        """Look up a strategy class.

        Raises:
            UnknownTaskError: If nothing is registered under ``identifier``.
        """
        try:
            return self._strategies[identifier]
        except KeyError:
            raise UnknownTaskError(
                task_name or identifier, identifier
            ) from None

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._strategies

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._strategies))

    def __len__(self) -> int:
        return len(self._strategies)


def build_default_registry() -> StrategyRegistry:
    """Create the frozen registry of built-in strategies."""
    registry = StrategyRegistry()
    registry.register(Parl36thToDateStrategy)
    registry.register(Parl1stTo35thStrategy)
    registry.freeze()
    return registry


def parliament_number(value: str) -> int:
    """Read the leading integer of a parliament option ("37", "37th").

    Raises:
        InvalidConfigError: If ``value`` doesn't start with an integer.
    """
    match = _LEADING_INT_RE.match(value)
    if match is None:
        raise InvalidConfigError(
            PARLIAMENT_KEY, value, "expected a parliament number"
        )
    return int(match.group(1))


def select_people_strategy(config: ScrapeConfig) -> str:
    """Choose the people strategy for a run's parliament."""
    if PARLIAMENT_KEY not in config:
        return Parl36thToDateStrategy.identifier
    if parliament_number(config[PARLIAMENT_KEY]) >= MODERN_ERA_THRESHOLD:
        return Parl36thToDateStrategy.identifier
    return Parl1stTo35thStrategy.identifier


class StrategySelector:
    """Resolves a task and its options to exactly one strategy.

    Selection is a pure function of the task name and the ScrapeConfig.
    Per-task resolvers override the identity rule without changes to this
    class.
    """

    def __init__(self, registry: StrategyRegistry | None = None) -> None:
        self.registry = (
            registry if registry is not None else build_default_registry()
        )
        self._resolvers: dict[str, Resolver] = {
            PEOPLE_TASK: select_people_strategy,
        }

    def register_resolver(self, task_name: str, resolver: Resolver) -> None:
        """Use ``resolver`` to select the strategy for ``task_name``."""
        self._resolvers[task_name] = resolver

    def tasks(self) -> list[str]:
        """Task names this selector can resolve."""
        return sorted(set(self._resolvers) | set(self.registry))

    def select(self, task_name: str, config: ScrapeConfig) -> str:
        """Return the identifier of the strategy for this task and config.

        Raises:
            UnknownTaskError: If the task has no resolver and no same-named
                strategy.
            InvalidConfigError: If the parliament option isn't a number.
        """
        resolver = self._resolvers.get(task_name)
        if resolver is not None:
            return resolver(config)
        if task_name in self.registry:
            return task_name
        raise UnknownTaskError(task_name)

    def resolve(
        self, task_name: str, config: ScrapeConfig
    ) -> tuple[str, type[PeopleStrategy]]:
        """Select a strategy and look up its class.

        Raises:
            UnknownTaskError: If the selected identifier is not registered.
        """
        identifier = self.select(task_name, config)
        return identifier, self.registry.get(identifier, task_name)
