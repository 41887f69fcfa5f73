"""
Instrumentation description models.

An InstrumentationDescription tells instrumentation satellites which code
scopes to probe, where instrumentation is restricted and which resources to
sample. Brokers specialise one shared description per adapter by adding that
adapter's own include/exclude filters.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set


@dataclass
class InstrumentationEntity:
    """A code scope and the probes injected into it."""

    scope: str
    probes: Set[str] = field(default_factory=set)


@dataclass
class InstrumentationRestriction:
    """Package/class prefixes instrumentation is limited to or kept away from."""

    inclusions: Set[str] = field(default_factory=set)
    exclusions: Set[str] = field(default_factory=set)

    def is_empty(self) -> bool:
        return not self.inclusions and not self.exclusions


@dataclass
class SamplingDescription:
    """A resource sampled periodically (delay in milliseconds)."""

    resource: str
    delay: int


@dataclass
class InstrumentationDescription:
    entities: List[InstrumentationEntity] = field(default_factory=list)
    restriction: InstrumentationRestriction = field(default_factory=InstrumentationRestriction)
    samplers: List[SamplingDescription] = field(default_factory=list)

    def add_entity(self, scope: str, *probes: str) -> "InstrumentationDescription":
        for entity in self.entities:
            if entity.scope == scope:
                entity.probes.update(probes)
                return self
        self.entities.append(InstrumentationEntity(scope, set(probes)))
        return self

    def add_sampler(self, resource: str, delay: int) -> "InstrumentationDescription":
        if not any(s.resource == resource and s.delay == delay for s in self.samplers):
            self.samplers.append(SamplingDescription(resource, delay))
        return self

    def include(self, prefixes: Iterable[str]) -> "InstrumentationDescription":
        self.restriction.inclusions.update(prefixes)
        return self

    def exclude(self, prefixes: Iterable[str]) -> "InstrumentationDescription":
        self.restriction.exclusions.update(prefixes)
        return self

    def is_empty(self) -> bool:
        return not self.entities and not self.samplers and self.restriction.is_empty()

    def copy(self) -> "InstrumentationDescription":
        return copy.deepcopy(self)

    def merge(self, other: "InstrumentationDescription") -> "InstrumentationDescription":
        """Return a new description holding the union of both descriptions."""
        merged = self.copy()
        for entity in other.entities:
            merged.add_entity(entity.scope, *entity.probes)
        for sampler in other.samplers:
            merged.add_sampler(sampler.resource, sampler.delay)
        merged.include(other.restriction.inclusions)
        merged.exclude(other.restriction.exclusions)
        return merged

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entities": [
                {"scope": e.scope, "probes": sorted(e.probes)} for e in self.entities
            ],
            "inclusions": sorted(self.restriction.inclusions),
            "exclusions": sorted(self.restriction.exclusions),
            "samplers": [{"resource": s.resource, "delay": s.delay} for s in self.samplers],
        }
