import pytest
from fastapi.testclient import TestClient

from database import create_database, get_db
from gemini_service import ChatSession, get_chat_session
from main import app


class FakeChunk:
    def __init__(self, text):
        self.text = text


class FakeChat:
    """Replays a script of text fragments; an Exception entry is raised at that point."""

    def __init__(self, script):
        self.script = script
        self.sent = []

    def send_message_stream(self, message):
        self.sent.append(message)
        for entry in self.script:
            if isinstance(entry, Exception):
                raise entry
            yield FakeChunk(entry)


class FakeChats:
    def __init__(self, owner):
        self.owner = owner

    def create(self, model, config):
        self.owner.created.append({"model": model, "config": config})
        return FakeChat(self.owner.script)


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModels:
    def __init__(self, owner):
        self.owner = owner

    def generate_content(self, model, contents):
        self.owner.prompts.append(contents)
        if isinstance(self.owner.copy_text, Exception):
            raise self.owner.copy_text
        return FakeResponse(self.owner.copy_text)


class FakeClient:
    def __init__(self, script=None, copy_text="📚 New release! #Kavithedal"):
        self.script = script if script is not None else ["Hello", " reader"]
        self.copy_text = copy_text
        self.created = []
        self.prompts = []
        self.chats = FakeChats(self)
        self.models = FakeModels(self)


@pytest.fixture
def db():
    return create_database()


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def chat_session(fake_client):
    return ChatSession(client_factory=lambda: fake_client)


@pytest.fixture
def client(db, chat_session):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_chat_session] = lambda: chat_session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    response = client.post("/auth/login", json={"password": "admin123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
