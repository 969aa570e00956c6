"""Sites, samples and the species catalog.

A Sample is the finite collection of surveyed sites. It is immutable:
jackknife replicates are new Samples built with ``Sample.without``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Hashable, Iterable, Iterator, Mapping, Tuple

import pandas as pd

from betadiv.core.errors import MalformedSample


def _is_missing(value: Any) -> bool:
    # None, NaN of any float width, pd.NA and pd.NaT
    return value is None or (pd.api.types.is_scalar(value) and bool(pd.isna(value)))


def _as_species_set(site_id: Hashable, species: Any) -> FrozenSet[Hashable]:
    if isinstance(species, (str, bytes)):
        raise MalformedSample(
            f"Species of site {site_id!r} must be a collection of codes, "
            f"got a single string {species!r}"
        )
    try:
        entries = list(species)
    except TypeError:
        raise MalformedSample(
            f"Species of site {site_id!r} are not iterable: {type(species).__name__}"
        ) from None

    if any(_is_missing(s) for s in entries):
        raise MalformedSample(f"Missing species entries in site {site_id!r}")

    try:
        return frozenset(entries)
    except TypeError as e:
        raise MalformedSample(f"Unhashable species code in site {site_id!r}: {e}") from None


@dataclass(frozen=True)
class Site:
    """
    A sampled unit with the set of species observed there.

    Any collection of species codes is accepted and collapsed to a frozenset,
    so duplicates disappear. An empty collection gives an empty site.

    Attributes:
        site_id: Identifier, unique within a sample
        species: Species codes observed at the site (presence only)

    Raises:
        MalformedSample: If the collection is a bare string, is not
            iterable, or holds missing or unhashable entries
    """

    site_id: Hashable
    species: FrozenSet[Hashable] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "species", _as_species_set(self.site_id, self.species))

    @classmethod
    def from_species(cls, site_id: Hashable, species: Iterable[Hashable]) -> "Site":
        """Create a site from any collection of species codes."""
        return cls(site_id=site_id, species=species)

    @property
    def richness(self) -> int:
        """Number of distinct species at the site."""
        return len(self.species)

    def __repr__(self) -> str:
        return f"Site(id={self.site_id!r}, richness={self.richness})"


@dataclass(frozen=True)
class Sample:
    """
    Immutable collection of sites keyed by site identifier.

    Site order follows construction order and is kept by every derived
    sample, which makes feature vectors and replicate orders reproducible.

    Attributes:
        sites: Sites in sample order
    """

    sites: Tuple[Site, ...] = ()
    _index: Dict[Hashable, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Reject duplicate site identifiers."""
        index: Dict[Hashable, int] = {}
        for position, site in enumerate(self.sites):
            if not isinstance(site, Site):
                raise MalformedSample(f"Expected Site instances, got {type(site).__name__}")
            if site.site_id in index:
                raise MalformedSample(f"Duplicate site identifier {site.site_id!r}")
            index[site.site_id] = position
        object.__setattr__(self, "sites", tuple(self.sites))
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_mapping(cls, data: Mapping[Hashable, Iterable[Hashable]]) -> "Sample":
        """
        Create a sample from {site_id: species collection}.

        Args:
            data: Mapping of site identifier to the species observed there

        Returns:
            Sample with one Site per key

        Raises:
            MalformedSample: If any species collection is not a well-defined set
        """
        if data is None:
            raise MalformedSample("Sample data must be a mapping, got None")
        return cls(sites=tuple(Site.from_species(k, v) for k, v in data.items()))

    @property
    def site_ids(self) -> Tuple[Hashable, ...]:
        return tuple(site.site_id for site in self.sites)

    def without(self, *site_ids: Hashable) -> "Sample":
        """
        Return a new sample with the given sites removed.

        Raises:
            KeyError: If a site identifier is not in the sample
        """
        for site_id in site_ids:
            if site_id not in self._index:
                raise KeyError(f"Site {site_id!r} not in sample")
        dropped = set(site_ids)
        return Sample(sites=tuple(s for s in self.sites if s.site_id not in dropped))

    def to_dict(self) -> Dict[Hashable, FrozenSet[Hashable]]:
        return {site.site_id: site.species for site in self.sites}

    def __len__(self) -> int:
        return len(self.sites)

    def __iter__(self) -> Iterator[Site]:
        return iter(self.sites)

    def __contains__(self, site_id: object) -> bool:
        return site_id in self._index

    def __getitem__(self, site_id: Hashable) -> Site:
        return self.sites[self._index[site_id]]

    def __repr__(self) -> str:
        return f"Sample(sites={len(self.sites)})"


@dataclass(frozen=True)
class SpeciesCatalog:
    """
    Union of the species observed in a sample.

    Attributes:
        species: All distinct species codes across sites
        site_species: Deduplicated species set per site, in sample order
    """

    species: FrozenSet[Hashable]
    site_species: Dict[Hashable, FrozenSet[Hashable]]

    @property
    def total_species(self) -> int:
        return len(self.species)


def build_species_catalog(sample: Sample) -> SpeciesCatalog:
    """Build the union species set and per-site species sets of a sample."""
    union: FrozenSet[Hashable] = frozenset().union(*(site.species for site in sample))
    return SpeciesCatalog(species=union, site_species=sample.to_dict())
