"""
Operator Registry Module

Name-based lookup of pluggable strategies. Each operator family
(selection, crossover, mutation, replacement, scheduler) has its own
registry holding a table of built-in strategies plus exactly one
user-defined slot.

Usage:
    registry = OperatorRegistry("crossover", CROSSOVER_OPERATORS)
    registry.select("order1")
    registry.register_user("my_crossover", my_function)
"""

from typing import Callable, Dict, List, Optional, Tuple

from ga_exceptions import UnknownStrategy


UNSPECIFIED = "Unspecified"
UNKNOWN = "Unknown"


class OperatorRegistry:
    """
    Strategy table for one operator family.

    Names are resolved against the user slot first, then against the
    built-ins. An exact built-in name wins; otherwise the built-in agreeing
    with the requested name over the longest common prefix is chosen. A tie
    between several built-ins is an error.
    """

    def __init__(self, family: str, builtins: Dict[str, Callable]):
        """
        Initialize the registry.

        Args:
            family: Family name used in error messages
            builtins: Ordered mapping of built-in names to callables
        """
        self.family = family
        self._builtins: List[Tuple[str, Callable]] = list(builtins.items())
        self._user_name: Optional[str] = None
        self._user_fn: Optional[Callable] = None
        self.current: Optional[Callable] = None

        self.stats = {
            'selections': 0,
            'user_overrides': 0
        }

    @property
    def builtin_names(self) -> List[str]:
        return [name for name, _ in self._builtins]

    def register_user(self, name: Optional[str], fn: Callable) -> Callable:
        """
        Set the user-defined slot and make it the active strategy.

        Args:
            name: Label of the user strategy (may be None)
            fn: Strategy callable

        Returns:
            The active strategy
        """
        self._user_name = name
        self._user_fn = fn
        self.current = fn
        self.stats['user_overrides'] += 1
        return fn

    def resolve(self, name: str) -> Callable:
        """
        Find the strategy for `name` without selecting it.

        Raises:
            UnknownStrategy: If nothing matches, or the name is an ambiguous
                prefix of several built-ins
        """
        if name:
            if self._user_fn is not None and name.startswith(self._user_name or UNSPECIFIED):
                return self._user_fn

            for builtin_name, fn in self._builtins:
                if builtin_name == name:
                    return fn

            matches = []
            for builtin_name, fn in self._builtins:
                common = min(len(name), len(builtin_name))
                if name[:common] == builtin_name[:common]:
                    matches.append((common, builtin_name, fn))

            if matches:
                longest = max(common for common, _, _ in matches)
                best = [(n, fn) for common, n, fn in matches if common == longest]
                if len(best) > 1:
                    raise UnknownStrategy(self.family, name, [n for n, _ in best])
                return best[0][1]

        raise UnknownStrategy(self.family, name)

    def select(self, name: str) -> Callable:
        """
        Make the strategy matching `name` active.

        Raises:
            UnknownStrategy: If nothing matches
        """
        self.current = self.resolve(name)
        self.stats['selections'] += 1
        return self.current

    def current_name(self) -> str:
        """
        Name of the active strategy.

        Returns:
            The strategy name, "Unspecified" if the matching slot has no
            name, "Unknown" if the active strategy is in no slot
        """
        if self.current is None:
            return UNKNOWN

        if self._user_fn is not None and self.current is self._user_fn:
            return self._user_name if self._user_name else UNSPECIFIED

        for builtin_name, fn in self._builtins:
            if fn is self.current:
                return builtin_name if builtin_name else UNSPECIFIED

        return UNKNOWN

    def __call__(self, *args, **kwargs):
        if self.current is None:
            raise UnknownStrategy(self.family, None)
        return self.current(*args, **kwargs)

    def get_statistics(self) -> dict:
        """Get registry statistics."""
        stats = self.stats.copy()
        stats['current'] = self.current_name()
        return stats
