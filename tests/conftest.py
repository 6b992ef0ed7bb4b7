import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"
os.environ.pop("REQUIRE_LOGIN", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import main  # noqa: E402
from analyzer import get_completion_client, get_text_extractor  # noqa: E402
from database import Base, get_db  # noqa: E402
from sessions import InMemorySessionStore, get_session_store  # noqa: E402


JD_ANALYSIS = (
    '{"mode":"resume_jd","ats_score":80,"keyword_match":100,'
    '"matched_keywords":["Python","SQL"],"missing_keywords":[],'
    '"strengths":["..."],"weaknesses":["..."],"enhancements":["..."],'
    '"section_feedback":{"skills":"...","projects":"...","experience":"...","education":"..."}}'
)

RESUME_ONLY_ANALYSIS = (
    '{"mode":"resume_only","ats_score":65,'
    '"strengths":["Clear layout"],"weaknesses":["No metrics"],"enhancements":["Quantify impact"],'
    '"section_feedback":{"skills":"ok","projects":"thin","experience":"good","education":"ok"}}'
)


class FakeExtractor:
    def __init__(self, text: str = "Python, SQL") -> None:
        self.text = text
        self.calls: list[tuple[str, str]] = []
        self.existed: list[bool] = []

    def extract(self, path: str, content_type: str) -> str:
        self.calls.append((path, content_type))
        self.existed.append(os.path.exists(path))
        if isinstance(self.text, Exception):
            raise self.text
        return self.text


class FakeCompletionClient:
    def __init__(self, output: object = JD_ANALYSIS) -> None:
        self.output = output
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.output, Exception):
            raise self.output
        return str(self.output)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def completion() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def client(session_factory, session_store, extractor, completion):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    overrides = main.app.dependency_overrides
    overrides[get_db] = _get_db
    overrides[get_session_store] = lambda: session_store
    overrides[get_text_extractor] = lambda: extractor
    overrides[get_completion_client] = lambda: completion
    try:
        yield TestClient(main.app)
    finally:
        overrides.clear()


def pdf_upload(name: str = "resume.pdf") -> dict:
    return {"resume": (name, b"%PDF-1.4 test resume", "application/pdf")}


def register_and_login(client, username: str = "alice", password: str = "s3cret") -> None:
    assert client.post("/register", json={"username": username, "password": password}).json()["success"]
    assert client.post("/login", json={"username": username, "password": password}).json()["success"]
