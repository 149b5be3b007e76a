"""Shared pytest fixtures for all tests."""
import os
import pytest

# Set test configuration before importing anything else
os.environ["DATABASE_URL"] = "sqlite://"

import fakeredis
import httpx
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from execora.config import Settings
from execora.core.database import Base

# Import all models to register them with Base before creating tables
from execora.models.execution import Execution  # noqa: F401


@pytest.fixture(autouse=True)
def reset_redis_client():
    """
    Reset the Redis client singleton before each test.

    Prevents a client created by one test from leaking into the next.
    """
    from execora.core import redis as redis_module

    redis_module._redis_client = None
    yield
    redis_module._redis_client = None


@pytest.fixture
def redis_client():
    """Provide an in-process Redis server, empty for each test."""
    client = fakeredis.FakeRedis(decode_responses=True)
    client.flushall()
    yield client
    client.flushall()


@pytest.fixture
def test_settings(tmp_path):
    """Settings with short limits and a per-test temp directory."""
    return Settings(
        DATABASE_URL="sqlite://",
        QUEUE_NAME="test-executions",
        EXECUTOR_URL="http://executor",
        EXECUTION_TIMEOUT_GRACE=2.0,
        MAX_EXECUTION_TIME=10000,
        MAX_OUTPUT_SIZE=64 * 1024,
        EXECUTION_TEMP_DIR=tmp_path / "execution-tmp",
    )


@pytest.fixture
def test_engine(tmp_path):
    """
    Create a file-backed SQLite engine for one test.

    A file (not :memory:) lets sessions opened from worker threads see
    the same data through their own connections.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'execora-test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db_session(session_factory):
    """Create a new database session for a test."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def execution_queue(redis_client):
    """ExecutionQueue over the in-process Redis."""
    from execora.services.execution_queue import ExecutionQueue

    return ExecutionQueue(redis_client, "test-executions")


@pytest.fixture
def executor_app(test_settings):
    """Executor service app with every runner, using the test settings."""
    from execora.api.schemas.execution import default_resource_limits
    from execora.executor.app import create_executor_app
    from execora.executor.orchestrator import ExecutionOrchestrator
    from execora.executor.runner_registry import build_default_registry

    orchestrator = ExecutionOrchestrator(
        build_default_registry(test_settings),
        default_resource_limits(test_settings),
    )
    return create_executor_app(orchestrator)


@pytest.fixture
def orchestrator_client(executor_app):
    """OrchestratorClient talking to the executor app in-process."""
    from execora.worker.orchestrator_client import OrchestratorClient

    http_client = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=executor_app),
        base_url="http://executor",
    )
    return OrchestratorClient("http://executor", client=http_client)


@pytest.fixture
def queue_manager(execution_queue, orchestrator_client, session_factory, test_settings):
    """Queue manager wired to the in-process executor, Redis and database."""
    from execora.worker.queue_manager import ExecutionQueueManager

    return ExecutionQueueManager(
        execution_queue,
        orchestrator_client,
        session_factory,
        test_settings,
    )


@pytest.fixture
def make_artifact():
    """Factory for artifact snapshots."""
    from execora.api.schemas.execution import ArtifactSnapshot

    def _make(content="print('hello')", type="python-script", language="python", **metadata):
        return ArtifactSnapshot(
            id="artifact-1",
            type=type,
            language=language,
            content=content,
            metadata=metadata,
        )

    return _make


@pytest.fixture
def create_execution(session_factory):
    """Create a QUEUED execution record and return its ID."""
    from execora.services.execution_service import ExecutionService

    def _create(artifact_id="artifact-1", input=None):
        session = session_factory()
        try:
            execution = ExecutionService(session).create_execution(artifact_id, input=input)
            return execution.execution_id
        finally:
            session.close()

    return _create
