from __future__ import annotations

from typing import Dict, Iterator, Optional, Sequence, Tuple

from pose_editor.core.skeleton import Joint, distance

PairKey = Tuple[int, int]


def pair_key(p1: int, p2: int) -> PairKey:
    p1, p2 = int(p1), int(p2)
    if p1 == p2:
        raise ValueError("constraint endpoints must differ")
    return (p1, p2) if p1 < p2 else (p2, p1)


class ConstraintStore:
    """Rigid target distances keyed by unordered joint pair."""

    def __init__(self, distances: Optional[Dict[PairKey, float]] = None):
        self._distances: Dict[PairKey, float] = {}
        for (p1, p2), dist in (distances or {}).items():
            self.set(p1, p2, dist)

    def set(self, p1: int, p2: int, dist: float) -> None:
        self._distances[pair_key(p1, p2)] = float(dist)

    def remove(self, p1: int, p2: int) -> None:
        self._distances.pop(pair_key(p1, p2), None)

    def get(self, p1: int, p2: int) -> Optional[float]:
        return self._distances.get(pair_key(p1, p2))

    def neighbors(self, joint_id: int) -> set[int]:
        out = set()
        for a, b in self._distances:
            if a == joint_id:
                out.add(b)
            elif b == joint_id:
                out.add(a)
        return out

    def touching(self, joint_id: int) -> list[tuple[int, float]]:
        """(partner id, target distance) for every constraint on ``joint_id``."""
        out = []
        for (a, b), dist in self._distances.items():
            if a == joint_id:
                out.append((b, dist))
            elif b == joint_id:
                out.append((a, dist))
        return out

    def copy(self) -> "ConstraintStore":
        return ConstraintStore(dict(self._distances))

    def scaled(self, factor: float) -> "ConstraintStore":
        return ConstraintStore(
            {key: dist * float(factor) for key, dist in self._distances.items()}
        )

    def recomputed(self, keypoints: Sequence[Joint]) -> "ConstraintStore":
        by_id = {kp.id: kp for kp in keypoints}
        out = ConstraintStore()
        for a, b in self._distances:
            if a in by_id and b in by_id:
                out.set(a, b, distance(by_id[a], by_id[b]))
        return out

    def items(self) -> list[tuple[PairKey, float]]:
        return list(self._distances.items())

    def keys(self) -> list[PairKey]:
        return list(self._distances.keys())

    def to_dict(self) -> Dict[str, float]:
        return {f"{a}-{b}": float(dist) for (a, b), dist in self._distances.items()}

    @classmethod
    def from_dict(cls, payload: Dict[str, float]) -> "ConstraintStore":
        store = cls()
        for key, dist in (payload or {}).items():
            a, b = (int(part) for part in str(key).split("-", 1))
            store.set(a, b, float(dist))
        return store

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        try:
            return pair_key(*key) in self._distances
        except ValueError:
            return False

    def __iter__(self) -> Iterator[PairKey]:
        return iter(list(self._distances))

    def __len__(self) -> int:
        return len(self._distances)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConstraintStore):
            return NotImplemented
        return self._distances == other._distances

    def __repr__(self) -> str:
        return f"ConstraintStore({self.to_dict()!r})"
