"""测试夹具：为 pytest 提供数据库、存储与客户端的共享配置。"""

import os
import tempfile
from typing import Generator

TEST_DB_PATH = os.path.join(os.path.dirname(__file__), "test.db")
TEST_DATABASE_URL = f"sqlite:///{TEST_DB_PATH}"

# 必须在导入应用模块之前设置，确保配置单例读取到测试用的数据库与日志目录
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="organize_folder_logs_"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from organize_folder.main import app
from organize_folder.packages.scanner.core.dependencies import get_db
from organize_folder.packages.scanner.crud.app_state import app_state_crud
from organize_folder.packages.scanner.crud.entry import entry_crud
from organize_folder.packages.scanner.db import session as db_session
from organize_folder.packages.scanner.db.init_db import init_db
from organize_folder.packages.scanner.models.base import Base
from organize_folder.packages.scanner.services.entry_store import EntryStore


@pytest.fixture(scope="session", autouse=True)
def setup_test_database() -> Generator[None, None, None]:
    """创建隔离的 SQLite 测试数据库，并在会话结束后清理。"""
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)

    engine = db_session.create_db_engine(TEST_DATABASE_URL)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db_session.engine = engine
    db_session.SessionLocal = TestingSessionLocal

    Base.metadata.create_all(bind=engine)
    init_db()
    yield

    engine.dispose()
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture(autouse=True)
def clean_tables() -> Generator[None, None, None]:
    """每个用例前清空条目与应用状态，避免用例之间相互影响。"""
    session = db_session.SessionLocal()
    try:
        entry_crud.delete_all(session)
        app_state_crud.delete_all(session)
    finally:
        session.close()
    yield


@pytest.fixture()
def db_session_fixture() -> Generator[Session, None, None]:
    """提供给测试用例使用的数据库会话。"""
    session = db_session.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store(db_session_fixture: Session) -> EntryStore:
    return EntryStore(db_session_fixture)


@pytest.fixture()
def client(db_session_fixture):
    """构建 FastAPI TestClient，并注入测试专用的数据库依赖。"""
    def override_get_db() -> Generator[Session, None, None]:
        session = db_session.SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
