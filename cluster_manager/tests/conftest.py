import logging

import pytest

from cluster_manager.client import ClusterClient
from cluster_manager.config import ClusterManagerConfig
from cluster_manager.tests.helpers import FakeRunner, write_kubeconfig


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    # the CLI binds a handler to the stderr of the invocation that configured it
    logger = logging.getLogger("cluster_manager")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def home(tmp_path):
    write_kubeconfig(tmp_path)
    return tmp_path


@pytest.fixture
def config(home):
    return ClusterManagerConfig(home=str(home))


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def client(config, runner):
    return ClusterClient(config, config.credentials(), runner=runner)
