import pytest

from flute_tuner import Bore, Hole, FluteEngine, create_bore


# Common test fixtures
@pytest.fixture
def plain_bore() -> Bore:
    """60 cm wooden tube, 19 mm bore, no holes."""
    return create_bore(60.0, 0.95, 0.4)


@pytest.fixture
def shuffled_bore(plain_bore) -> Bore:
    """Plain bore with three open holes stored out of positional order."""
    return plain_bore.copy_with_holes([
        Hole(10.0, 0.3, True),
        Hole(30.0, 0.3, True),
        Hole(20.0, 0.3, True),
    ])


@pytest.fixture
def engine() -> FluteEngine:
    return FluteEngine(60.0, 0.95, 0.4)
