from fastapi import status
from unispace.models.campus import Campus
from tests.conf_tests import (
    client,
    clear_db,
    test_db,
    test_user,
    admin_user,
    auth_headers,
    admin_headers,
    test_campus,
    test_room,
)


def test_create_campus(admin_headers):
    response = client.post("/campuses/", json={"name": "North", "address": "2 Hill St"}, headers=admin_headers)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["name"] == "North"


def test_create_campus_requires_admin(auth_headers):
    response = client.post("/campuses/", json={"name": "North"}, headers=auth_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_create_campus_duplicate_name(admin_headers, test_campus):
    response = client.post("/campuses/", json={"name": test_campus.name}, headers=admin_headers)
    assert response.status_code == status.HTTP_409_CONFLICT


def test_list_and_get_campus(test_campus):
    response = client.get("/campuses/")
    assert [c["id"] for c in response.json()] == [test_campus.id]
    response = client.get(f"/campuses/{test_campus.id}")
    assert response.json()["address"] == test_campus.address


def test_get_campus_not_found():
    response = client.get("/campuses/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_update_campus(admin_headers, test_campus):
    response = client.put(f"/campuses/{test_campus.id}", json={"address": "New Road"}, headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["address"] == "New Road"
    assert response.json()["name"] == test_campus.name


def test_delete_campus_with_rooms(admin_headers, test_room):
    response = client.delete(f"/campuses/{test_room.campus_id}", headers=admin_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_delete_campus(admin_headers, test_campus, test_db):
    response = client.delete(f"/campuses/{test_campus.id}", headers=admin_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert test_db.query(Campus).count() == 0
    # the name can be reused once the campus is gone
    response = client.post("/campuses/", json={"name": test_campus.name}, headers=admin_headers)
    assert response.status_code == status.HTTP_201_CREATED
