"""
Resource Actions - Resource Selector
====================================

Narrows an application's managed-resource inventory to the target set.

A resource matches when every constrained field of the criteria equals the
resource's field exactly (case-sensitive). Empty criteria fields are
unconstrained. The result preserves inventory order.
"""

from dataclasses import dataclass, replace
from typing import Iterable

from shared.constants import Multiplicity
from shared.schemas import ManagedResource
from src.core.errors import AmbiguousResourceSelection, NoMatchingResource

_FIELDS = ("group", "kind", "namespace", "name")


@dataclass(frozen=True)
class SelectorCriteria:
    """
    Optional constraints used to pick target resources.

    Attributes:
        group: API group to match, "" for any
        kind: Kind to match, "" for any
        namespace: Namespace to match, "" for any
        name: Resource name to match, "" for any
        multiplicity: SINGLE requires exactly one match, ANY accepts zero or more
    """
    group: str = ""
    kind: str = ""
    namespace: str = ""
    name: str = ""
    multiplicity: Multiplicity = Multiplicity.SINGLE

    def constraints(self) -> dict[str, str]:
        """Constrained fields only, in group/kind/namespace/name order."""
        return {
            field_name: getattr(self, field_name)
            for field_name in _FIELDS
            if getattr(self, field_name)
        }

    def matches(self, resource: ManagedResource) -> bool:
        return all(
            getattr(resource, field_name) == value
            for field_name, value in self.constraints().items()
        )

    def with_multiplicity(self, multiplicity: Multiplicity) -> "SelectorCriteria":
        return replace(self, multiplicity=multiplicity)

    def describe(self) -> str:
        constraints = self.constraints()
        if not constraints:
            return "any resource"
        return ", ".join(f"{key}={value}" for key, value in constraints.items())


def select_resources(
    inventory: Iterable[ManagedResource],
    criteria: SelectorCriteria
) -> list[ManagedResource]:
    """
    Select the resources of `inventory` matching `criteria`.

    Raises:
        NoMatchingResource: SINGLE multiplicity and nothing matched
        AmbiguousResourceSelection: SINGLE multiplicity and several matched
    """
    selected = [resource for resource in inventory if criteria.matches(resource)]

    if criteria.multiplicity == Multiplicity.SINGLE:
        if not selected:
            raise NoMatchingResource(criteria)
        if len(selected) > 1:
            raise AmbiguousResourceSelection(criteria, selected)

    return selected
