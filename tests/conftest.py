# tests/conftest.py
import os
import shutil
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from projectdocs.api.deps import get_notifier
from projectdocs.config import settings
from projectdocs.database import Base, get_db
from projectdocs.main import app
from projectdocs.models import (
    Attachment,
    Document,
    DocumentCategory,
    Member,
    NotificationSetting,
    Project,
    Role,
    User,
)
from projectdocs.services.mailer import Notifier

SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"


class RecordingNotifier(Notifier):
    """Keeps deliveries in memory; recipients in `fail_for` raise instead"""

    def __init__(self):
        self.deliveries = []
        self.fail_for = set()

    async def send(self, delivery):
        if delivery.recipient_id in self.fail_for:
            raise RuntimeError(f"SMTP refused recipient {delivery.recipient_id}")
        self.deliveries.append(delivery)

    def recipients(self, kind=None):
        return [d.recipient_id for d in self.deliveries if kind is None or d.kind == kind]


@pytest.fixture(scope="session")
def engine():
    """Create test database engine"""
    return create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool  # Needed for SQLite in-memory database
    )


@pytest.fixture
def tables(engine):
    """Fresh tables for every test"""
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db_session(engine, tables):
    """Creates a new database session for a test"""
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture(scope="session")
def temp_storage_dir():
    """Create temporary storage directory for test files"""
    temp_dir = tempfile.mkdtemp()
    Path(temp_dir, "attachments").mkdir(parents=True, exist_ok=True)
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture(autouse=True)
def override_settings(temp_storage_dir):
    """Override settings for testing"""
    original_storage = settings.STORAGE_PATH
    original_attachments = settings.ATTACHMENTS_PATH
    original_deferred = settings.NOTIFICATIONS_DEFERRED

    settings.STORAGE_PATH = temp_storage_dir
    settings.ATTACHMENTS_PATH = temp_storage_dir / "attachments"

    yield

    settings.STORAGE_PATH = original_storage
    settings.ATTACHMENTS_PATH = original_attachments
    settings.NOTIFICATIONS_DEFERRED = original_deferred


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def admin(db_session):
    user = User(login="admin", firstname="Admin", lastname="User", mail="admin@example.net", admin=True)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def client(db_session, notifier, admin):
    """Test client acting as the admin, using the test database"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app, headers={"X-User-Id": str(admin.id)}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def project(db_session):
    project = Project(name="Test Project", identifier="test-project", description="Test Description")
    db_session.add(project)
    db_session.commit()
    db_session.refresh(project)
    return project


@pytest.fixture
def default_category(db_session, project):
    category = DocumentCategory(project_id=project.id, name="Default Category", position=1)
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def document(db_session, project, default_category):
    document = Document(
        title="Sample Document",
        description="Sample description",
        project_id=project.id,
        category_id=default_category.id
    )
    db_session.add(document)
    db_session.commit()
    db_session.refresh(document)
    return document


@pytest.fixture
def create_user(db_session):
    """Factory for users, optionally members of a project with given permissions"""
    counter = {"n": 0}

    def _create_user(project=None, permissions=None, document_added=None, admin=False,
                     setting_project=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(login=f"user{n}", firstname="Bob", lastname=f"Number{n}",
                    mail=f"user{n}@example.net", admin=admin)
        db_session.add(user)
        db_session.flush()

        if project is not None:
            role = Role(name=f"role-{n}", permissions=list(permissions or []))
            db_session.add(Member(project=project, user=user, roles=[role]))

        if document_added is not None:
            db_session.add(NotificationSetting(
                user_id=user.id,
                project_id=setting_project.id if setting_project is not None else None,
                document_added=document_added
            ))

        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def create_attachment(db_session, temp_storage_dir):
    """Factory for uploaded attachments stored on disk"""
    def _create_attachment(author, container=None, filename="testfile.txt", content=b"test content"):
        path = temp_storage_dir / "attachments" / f"{author.id}-{filename}"
        path.write_bytes(content)
        attachment = Attachment(
            author_id=author.id,
            container_id=container.id if container is not None else None,
            filename=filename,
            disk_filename=str(path.relative_to(temp_storage_dir)),
            content_type="text/plain",
            filesize=len(content)
        )
        db_session.add(attachment)
        db_session.commit()
        db_session.refresh(attachment)
        return attachment

    return _create_attachment


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_files():
    """Clean up test files after all tests are done"""
    yield
    for file in ["projectdocs.db", "test-projectdocs.db"]:
        if os.path.exists(file):
            os.remove(file)
