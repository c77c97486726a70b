# =========== START of initial_conditions.py ===========
from __future__ import annotations
from typing import Callable, Dict, List, Optional

import numpy as np

from .logging_config import logger
from .enums import CellState, NUM_STATES
from .grid import GenerationPair


InitialCondition = Callable[[GenerationPair, np.random.Generator], None]



################################################
#              INITIAL CONDITIONS            #
################################################

class InitialConditionManager:
    """Manages and applies different initial grid conditions."""
    _instance: Optional['InitialConditionManager'] = None

    @classmethod
    def get_instance(cls) -> 'InitialConditionManager':
        """Get the shared InitialConditionManager."""
        if cls._instance is None:
            cls._instance = InitialConditionManager()
        return cls._instance

    def __init__(self):
        self._initial_conditions: Dict[str, InitialCondition] = {}
        self._register_defaults()

    def register(self, name: str, func: InitialCondition):
        """Register an initial condition function."""
        self._initial_conditions[name] = func
        logger.debug(f"Registered initial condition: {name}")

    def get(self, name: str) -> Optional[InitialCondition]:
        return self._initial_conditions.get(name)

    def get_all_names(self) -> List[str]:
        """Get a list of all registered initial condition names, Random first."""
        names = list(self._initial_conditions.keys())
        if "Random" in names:
            names.remove("Random")
            names.insert(0, "Random")
        return names

    def apply(self, name: str, pair: GenerationPair, seed: Optional[int] = None):
        """Fill the current buffer of ``pair`` using the named condition."""
        func = self.get(name)
        if func is None:
            raise ValueError(f"Unknown initial condition '{name}'. Available: {self.get_all_names()}")
        rng = np.random.default_rng(seed)
        func(pair, rng)
        counts = pair.population()
        logger.info(f"Applied initial condition '{name}' (seed={seed}): "
                    + ", ".join(f"{state.name}={count}" for state, count in counts.items() if count))

    @staticmethod
    def initialize_random(pair: GenerationPair, rng: np.random.Generator):
        """Uniform over EMPTY, BLUE and ORANGE"""
        pair.seed(rng.integers(0, int(CellState.ORANGE) + 1, size=pair.shape, dtype=np.uint8))

    @staticmethod
    def initialize_random_with_decay(pair: GenerationPair, rng: np.random.Generator):
        """Uniform over every state, tombstones included"""
        pair.seed(rng.integers(0, NUM_STATES, size=pair.shape, dtype=np.uint8))

    @staticmethod
    def initialize_empty(pair: GenerationPair, rng: np.random.Generator):
        pair.seed(np.zeros(pair.shape, dtype=np.uint8))

    def _register_defaults(self):
        self.register("Random", self.initialize_random)
        self.register("Random With Decay", self.initialize_random_with_decay)
        self.register("Empty", self.initialize_empty)


# =========== END of initial_conditions.py ===========
