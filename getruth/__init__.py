"""
getruth - Grammatical Evolution of truth-table programs

Evolves fixed-size integer genotypes that decode, through a context-free
grammar, into expressions scored against input/output samples.
"""

__version__ = "0.1.0"

from .config import *  # noqa: F401,F403
from .evolution import *  # noqa: F401,F403
from .execution import *  # noqa: F401,F403
from .generation import *  # noqa: F401,F403
from .grammar import *  # noqa: F401,F403
from .regression import *  # noqa: F401,F403
from .utils import *  # noqa: F401,F403
