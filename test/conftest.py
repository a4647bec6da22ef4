import pytest


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: marks test as slow running test")
    config.addinivalue_line(
        "markers", "hardware: marks test that require physical hardware"
    )


@pytest.fixture()
def log_messages():
    """Collect loguru messages emitted during a test."""
    from loguru import logger

    from labsweep.util import TEST_LOGLEVEL

    messages = []
    sink_id = logger.add(lambda msg: messages.append(str(msg)), level=TEST_LOGLEVEL)
    yield messages
    logger.remove(sink_id)
