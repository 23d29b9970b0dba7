# tests/api/test_projects.py
from fastapi import status


def test_create_project(client):
    """Test project creation"""
    response = client.post(
        "/api/projects",
        json={"name": "New Project", "identifier": "new-project", "description": "Project Description"}
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["name"] == "New Project"
    assert data["identifier"] == "new-project"
    assert "id" in data
    assert "created_at" in data


def test_duplicate_identifier(client, project):
    response = client.post("/api/projects", json={"name": "Again", "identifier": project.identifier})
    assert response.status_code == status.HTTP_409_CONFLICT


def test_invalid_identifier(client):
    response = client.post("/api/projects", json={"name": "Bad", "identifier": "Has Spaces"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_get_project(client, project, document):
    """Test getting a single project"""
    response = client.get(f"/api/projects/{project.id}")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == project.name
    assert data["document_count"] == 1


def test_list_projects(client, project):
    response = client.get("/api/projects")

    assert response.status_code == status.HTTP_200_OK
    assert any(p["id"] == project.id for p in response.json())


def test_update_project(client, project):
    response = client.put(f"/api/projects/{project.id}", json={"name": "Updated Project"})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == "Updated Project"
    assert data["description"] == "Test Description"


def test_delete_project_keeps_attachments(client, db_session, project, document, admin, create_attachment):
    from projectdocs.models import Attachment

    attachment = create_attachment(admin, container=document)

    response = client.delete(f"/api/projects/{project.id}")

    assert response.status_code == status.HTTP_200_OK
    assert client.get(f"/api/projects/{project.id}").status_code == status.HTTP_404_NOT_FOUND
    db_session.expire_all()
    assert db_session.query(Attachment).filter(Attachment.id == attachment.id).one().container_id is None


def test_get_nonexistent_project(client):
    response = client.get("/api/projects/99999")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_requires_admin(client, project, create_user):
    user = create_user(project=project, permissions=["view_documents", "manage_documents"])
    response = client.get("/api/projects", headers={"X-User-Id": str(user.id)})
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_categories(client, project):
    created = client.post(f"/api/projects/{project.id}/categories", json={"name": "Specs", "position": 2})
    assert created.status_code == status.HTTP_201_CREATED
    client.post(f"/api/projects/{project.id}/categories", json={"name": "Drawings", "position": 1})

    response = client.get(f"/api/projects/{project.id}/categories")

    assert [c["name"] for c in response.json()] == ["Drawings", "Specs"]


def test_members(client, project, create_user):
    user = create_user()
    role = client.post("/api/roles", json={"name": "Reader", "permissions": ["view_documents"]}).json()

    response = client.post(f"/api/projects/{project.id}/members",
                           json={"user_id": user.id, "role_ids": [role["id"]]})

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["permissions"] == ["view_documents"]

    again = client.post(f"/api/projects/{project.id}/members",
                        json={"user_id": user.id, "role_ids": [role["id"]]})
    assert again.status_code == status.HTTP_409_CONFLICT

    listed = client.get(f"/api/projects/{project.id}/members").json()
    assert [m["user_id"] for m in listed] == [user.id]


def test_member_with_unknown_role(client, project, create_user):
    user = create_user()
    response = client.post(f"/api/projects/{project.id}/members", json={"user_id": user.id, "role_ids": [999]})
    assert response.status_code == status.HTTP_404_NOT_FOUND
