"""Seeded random number management.

All randomness in a run flows through one ``RNGManager`` so that a seed
reproduces a run exactly. Contexts are independent ``random.Random``
instances; their seeds are derived with SHA-256 so they do not depend on
Python's per-process hash randomisation.
"""

from __future__ import annotations

import hashlib
import pickle
import random
import uuid
from typing import Any


def _derive_seed(*parts: Any) -> int:
    payload = "|".join(str(p) for p in parts).encode("utf-8")
    return int.from_bytes(hashlib.sha256(payload).digest()[:8], "big")


class RNGManager:
    """Hands out deterministic RNGs for named contexts."""

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = random.SystemRandom().randrange(2**63)
        self.seed = int(seed)
        self._contexts: dict[str, random.Random] = {}
        self._pair_counter = 0
        self._mutation_counter = 0

    def get_context_rng(self, context: str) -> random.Random:
        rng = self._contexts.get(context)
        if rng is None:
            rng = random.Random(_derive_seed(self.seed, "context", context))
            self._contexts[context] = rng
        return rng

    def get_rng_for_crossover(self, id1: Any, id2: Any) -> random.Random:
        """RNG for one crossover; independent of the parents' order."""
        a, b = sorted((str(id1), str(id2)))
        self._pair_counter += 1
        return random.Random(_derive_seed(self.seed, "crossover", a, b, self._pair_counter))

    def get_rng_for_mutation(self, genotype_id: Any) -> random.Random:
        self._mutation_counter += 1
        return random.Random(_derive_seed(self.seed, "mutation", genotype_id, self._mutation_counter))

    def new_id(self, context: str = "ids") -> uuid.UUID:
        return uuid.UUID(int=self.get_context_rng(context).getrandbits(128), version=4)

    def get_state(self) -> bytes:
        state = {
            "seed": self.seed,
            "contexts": {name: rng.getstate() for name, rng in self._contexts.items()},
            "pair_counter": self._pair_counter,
            "mutation_counter": self._mutation_counter,
        }
        return pickle.dumps(state)

    def set_state(self, state: bytes) -> None:
        data = pickle.loads(state)
        self.seed = data["seed"]
        self._contexts = {}
        for name, rng_state in data["contexts"].items():
            rng = random.Random()
            rng.setstate(rng_state)
            self._contexts[name] = rng
        self._pair_counter = data["pair_counter"]
        self._mutation_counter = data["mutation_counter"]


__all__ = ["RNGManager"]
