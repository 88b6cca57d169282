import numpy as np
import pytest

from skill_layout.models import ShapeParams


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def params():
    return ShapeParams(width=800, height=600)
