# gpi/names.py
"""
Country-name reconciliation between the score dataset and the boundary
GeoJSON.

Both sources are curated independently and disagree on naming ("USA" vs
"United States of America"). A small curated alias table covers the common
cases; anything else joins on the trimmed, lower-cased name.
"""
import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

import pandas as pd

from gpi.config import ALIAS_POLICY, BOUNDARY_NAME_KEY
from gpi.errors import JoinMiss

logger = logging.getLogger(__name__)

POLICIES = ("first", "last", "reject")

# dataset name -> Natural Earth NAME (both normalized)
DEFAULT_ALIASES: Dict[str, str] = {
    "usa": "united states of america",
    "united states": "united states of america",
    "us": "united states of america",
    "uk": "united kingdom",
    "great britain": "united kingdom",
    "russia": "russian federation",
    "korea, south": "south korea",
    "republic of korea": "south korea",
    "korea, north": "north korea",
    "dprk": "north korea",
    "dr congo": "dem. rep. congo",
    "democratic republic of the congo": "dem. rep. congo",
    "republic of the congo": "congo",
    "congo-brazzaville": "congo",
    "ivory coast": "côte d'ivoire",
    "cote d'ivoire": "côte d'ivoire",
    "czech republic": "czechia",
    "swaziland": "eswatini",
    "bosnia and herzegovina": "bosnia and herz.",
    "central african republic": "central african rep.",
    "south sudan": "s. sudan",
    "dominican republic": "dominican rep.",
    "equatorial guinea": "eq. guinea",
    "macedonia": "north macedonia",
    "east timor": "timor-leste",
    "turkiye": "turkey",
}


def norm_key(name) -> str:
    if name is None:
        return ""
    if isinstance(name, float) and pd.isna(name):
        return ""
    return str(name).strip().lower()


class AliasTable:
    """Forward aliases plus a derived inverse that keeps every candidate.

    The forward table need not be injective: two dataset names may alias the
    same boundary name. The inverse keeps all of them in authoring order and
    `resolve_backward` applies a policy to choose one.
    """

    def __init__(self, forward=None, policy=ALIAS_POLICY):
        if policy not in POLICIES:
            raise ValueError(f"Unknown alias policy {policy!r}; expected one of {POLICIES}")
        self.policy = policy
        self.forward: Dict[str, str] = {}
        self.inverse: Dict[str, Tuple[str, ...]] = {}
        for src, geo in (DEFAULT_ALIASES if forward is None else forward).items():
            src, geo = norm_key(src), norm_key(geo)
            self.forward[src] = geo
        for src, geo in self.forward.items():
            self.inverse[geo] = self.inverse.get(geo, ()) + (src,)

    def resolve_forward(self, name) -> str:
        key = norm_key(name)
        return self.forward.get(key, key)

    def candidates(self, name) -> Tuple[str, ...]:
        return self.inverse.get(norm_key(name), ())

    def resolve_backward(self, name, policy=None, among=None) -> str:
        """Dataset key for a boundary name.

        With `among`, candidates are first narrowed to keys that actually
        occur in the dataset; the policy then picks between what is left.
        """
        policy = policy or self.policy
        key = norm_key(name)
        found = self.inverse.get(key, ())
        if among is not None:
            found = tuple(c for c in found if c in among) or found
        if not found:
            return key
        if len(found) == 1 or policy == "first":
            return found[0]
        if policy == "last":
            return found[-1]
        if policy == "reject":
            logger.warning("Ambiguous boundary name %r (candidates %s); using it as-is", key, found)
            return key
        raise ValueError(f"Unknown alias policy {policy!r}")


class FeatureScore(NamedTuple):
    name: str
    key: Optional[str]
    score: Optional[float]


class Reconciler:
    def __init__(self, aliases: Optional[AliasTable] = None, name_key: str = BOUNDARY_NAME_KEY):
        self.aliases = aliases or AliasTable()
        self.name_key = name_key

    def feature_name(self, feat: dict) -> str:
        return str((feat.get("properties") or {}).get(self.name_key, "")).strip()

    def match_key(self, name, keys) -> str:
        """Dataset key for a boundary (or dataset) name; raises JoinMiss."""
        resolved = self.aliases.resolve_backward(name, among=keys)
        if resolved in keys:
            return resolved
        raw = norm_key(name)
        if raw in keys:
            return raw
        raise JoinMiss(name)

    def lookup(self, scores: Dict[str, float], name) -> float:
        return scores[self.match_key(name, scores)]

    def resolve_selection(self, name, keys) -> Optional[str]:
        if not norm_key(name):
            return None
        try:
            return self.match_key(name, keys)
        except JoinMiss:
            logger.debug("Selected country %r has no records", name)
            return None

    def join(self, features: Iterable[dict], scores: Dict[str, float], keys=None) -> List[FeatureScore]:
        """One entry per feature; features without a score get score=None.

        With `keys` (every country in the data), a feature whose country has
        records but no score in `scores` keeps its key, so it can still be
        highlighted.
        """
        keys = scores if keys is None else keys
        out = []
        for feat in features:
            name = self.feature_name(feat)
            try:
                key = self.match_key(name, keys)
            except JoinMiss:
                logger.debug("No data for boundary %r", name)
                out.append(FeatureScore(name, None, None))
                continue
            out.append(FeatureScore(name, key, scores.get(key)))
        return out

    def unmatched(self, features: Iterable[dict], keys) -> Tuple[List[str], List[str]]:
        """Boundary names with no data, and dataset keys with no boundary."""
        keys = set(keys)
        joined = self.join(features, dict.fromkeys(keys, 0.0))
        no_data = sorted(f.name for f in joined if f.key is None and f.name)
        no_shape = sorted(keys - {f.key for f in joined})
        return no_data, no_shape
