"""Reconciliation of a freshly fetched outdated set against the stored one.

A check result is classified by entry count, not deep equality: only
growth in the number of outdated packages counts as news. A same-size
swap (one package upgraded, another newly outdated) is ``Unchanged``.
"""

from dataclasses import dataclass

from brewctl.models.package import OutdatedPackage, OutdatedPackageSet


@dataclass(frozen=True, slots=True)
class Unchanged:
    """Incoming set has the same number of entries or fewer."""

    @property
    def is_grown(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Grown:
    """Incoming set has more entries than the stored one.

    Attributes:
        added: Records present in incoming but not in previous, by identity.
    """

    added: OutdatedPackageSet

    @property
    def is_grown(self) -> bool:
        return True

    @property
    def added_names(self) -> list[str]:
        """Names of added packages, sorted."""
        return sorted(p.name for p in self.added)


ReconciliationResult = Unchanged | Grown


def reconcile(
    previous: frozenset[OutdatedPackage],
    incoming: frozenset[OutdatedPackage],
) -> ReconciliationResult:
    """Classify the change from ``previous`` to ``incoming``.

    Args:
        previous: Outdated set currently stored in the repository.
        incoming: Outdated set returned by the latest check.

    Returns:
        ``Grown`` with the identity difference when incoming is larger,
        otherwise ``Unchanged``.
    """
    if len(incoming) > len(previous):
        return Grown(added=frozenset(incoming - previous))
    return Unchanged()
