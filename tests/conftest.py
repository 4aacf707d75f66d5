import sys
from pathlib import Path

import numpy as np
import pytest

# Moduły txa leżą w katalogu głównym repozytorium
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def make_grids(rng):
    """Sekwencja siatek z małymi zmianami między klatkami."""
    def _make(n, width=12, height=7, cell=1, change=0.1):
        grid = rng.integers(0, 256, (width, height, cell), dtype=np.uint8)
        grids = [grid.copy()]
        for _ in range(n - 1):
            mask = rng.random((width, height)) < change
            fresh = rng.integers(0, 256, (width, height, cell), dtype=np.uint8)
            grid = np.where(mask[:, :, None], fresh, grid).astype(np.uint8)
            grids.append(grid.copy())
        return grids
    return _make
