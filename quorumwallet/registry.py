"""
QuorumWallet Owner Registry

Immutable set of owner identities plus the approval threshold, fixed at
initialization. The ordered sequence drives deterministic iteration in
authorization checks; the derived membership set answers is_owner.
"""

from typing import Any, FrozenSet, Hashable, Iterable, Optional, Tuple

from .errors import InvalidConfiguration

# Owner-count ceiling used when the caller does not supply one.
DEFAULT_MAX_OWNERS = 50


class OwnerRegistry:
    """
    Owner set and threshold.

    Construction validates:
    - at least one owner, at most max_owners
    - no duplicate, None or empty-string owners
    - 0 < required <= owner_count
    """

    __slots__ = ("_owners", "_members", "_required")

    def __init__(
        self,
        owners: Iterable[Hashable],
        required: int,
        max_owners: Optional[int] = None
    ):
        if owners is None:
            raise InvalidConfiguration("owners must be a sequence of identities")
        ordered: Tuple[Any, ...] = tuple(owners)
        limit = DEFAULT_MAX_OWNERS if max_owners is None else max_owners

        if not ordered:
            raise InvalidConfiguration("at least one owner is required")
        if len(ordered) > limit:
            raise InvalidConfiguration(
                f"{len(ordered)} owners exceeds the maximum of {limit}"
            )
        for owner in ordered:
            if owner is None or owner == "":
                raise InvalidConfiguration("owner identity must not be empty")
        try:
            members = frozenset(ordered)
        except TypeError:
            raise InvalidConfiguration("owner identities must be hashable")
        if len(members) != len(ordered):
            raise InvalidConfiguration("owner identities must be unique")

        if isinstance(required, bool) or not isinstance(required, int):
            raise InvalidConfiguration(f"required must be an integer, got {required!r}")
        if not 0 < required <= len(ordered):
            raise InvalidConfiguration(
                f"required must satisfy 0 < required <= {len(ordered)}, got {required}"
            )

        self._owners = ordered
        self._members: FrozenSet[Any] = members
        self._required = required

    @property
    def owners(self) -> Tuple[Any, ...]:
        return self._owners

    @property
    def required(self) -> int:
        return self._required

    @property
    def owner_count(self) -> int:
        return len(self._owners)

    def is_owner(self, identity: Any) -> bool:
        try:
            return identity in self._members
        except TypeError:
            # Unhashable identities can never be owners.
            return False

    def __repr__(self) -> str:
        return f"OwnerRegistry({self._required}-of-{len(self._owners)})"
