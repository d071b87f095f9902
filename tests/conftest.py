import os
import random
import sys

import pytest

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from block_blast.game import GameConfig, GameSession  # noqa: E402


@pytest.fixture
def session():
    return GameSession(GameConfig(random_seed=1234))


@pytest.fixture
def rng():
    return random.Random(7)
