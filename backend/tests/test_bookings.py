"""
Tests for the hotel booking endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from hotel_booking.core.security import create_access_token
from hotel_booking.models import Booking, TicketStatus

import factories


async def _booking_count(db_session, room_id=None) -> int:
    query = select(func.count()).select_from(Booking)
    if room_id is not None:
        query = query.where(Booking.room_id == room_id)
    return (await db_session.execute(query)).scalar_one()


# GET /bookings

@pytest.mark.asyncio
async def test_get_booking_unauthenticated(client: AsyncClient):
    response = await client.get("/bookings")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_booking_invalid_token(client: AsyncClient):
    response = await client.get("/bookings", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_booking_without_session(client: AsyncClient, test_user):
    """A well-signed token is rejected once no session holds it."""
    token = create_access_token(data={"sub": str(test_user.id)})
    response = await client.get("/bookings", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_booking_without_enrollment(client: AsyncClient, auth_headers):
    response = await client.get("/bookings", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_booking_reserved_ticket(client: AsyncClient, db_session, test_user, auth_headers):
    await factories.create_eligible_user(db_session, user=test_user, status=TicketStatus.RESERVED)

    response = await client.get("/bookings", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_booking_when_user_has_none(client: AsyncClient, auth_headers, eligible_user):
    response = await client.get("/bookings", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_booking(client: AsyncClient, auth_headers, user_booking, room, hotel):
    """Booking is returned with its room in camelCase."""
    response = await client.get("/bookings", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == user_booking.id
    assert data["Room"]["id"] == room.id
    assert data["Room"]["name"] == room.name
    assert data["Room"]["capacity"] == room.capacity
    assert data["Room"]["hotelId"] == hotel.id
    assert "createdAt" in data["Room"]
    assert "updatedAt" in data["Room"]


@pytest.mark.asyncio
async def test_get_booking_ignores_other_users_booking(
    client: AsyncClient, db_session, auth_headers, eligible_user, room
):
    """Lookup is by owner, not by a booking id that happens to match the user id."""
    guest = await factories.create_user(db_session)
    await factories.create_booking(db_session, guest, room)

    response = await client.get("/bookings", headers=auth_headers)
    assert response.status_code == 404


# POST /bookings

@pytest.mark.asyncio
async def test_create_booking_unauthenticated(client: AsyncClient, room):
    response = await client.post("/bookings", json={"roomId": room.id})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_booking_without_body(client: AsyncClient, auth_headers):
    response = await client.post("/bookings", headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_booking_invalid_body(client: AsyncClient, auth_headers):
    response = await client.post("/bookings", json={"lorem": "ipsum"}, headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_booking_non_numeric_room(client: AsyncClient, auth_headers):
    response = await client.post("/bookings", json={"roomId": "abc"}, headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_booking_boolean_room(
    client: AsyncClient, db_session, auth_headers, eligible_user, room
):
    response = await client.post("/bookings", json={"roomId": True}, headers=auth_headers)
    assert response.status_code == 400
    assert await _booking_count(db_session, room.id) == 0


@pytest.mark.asyncio
async def test_create_booking_without_enrollment(client: AsyncClient, auth_headers, room):
    response = await client.post("/bookings", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_booking_remote_ticket(
    client: AsyncClient, db_session, test_user, auth_headers, room
):
    await factories.create_eligible_user(db_session, user=test_user, is_remote=True)

    response = await client.post("/bookings", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403
    assert await _booking_count(db_session) == 0


@pytest.mark.asyncio
async def test_create_booking_ticket_without_hotel(
    client: AsyncClient, db_session, test_user, auth_headers, room
):
    await factories.create_eligible_user(db_session, user=test_user, includes_hotel=False)

    response = await client.post("/bookings", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_booking_reserved_ticket(
    client: AsyncClient, db_session, test_user, auth_headers, room
):
    await factories.create_eligible_user(db_session, user=test_user, status=TicketStatus.RESERVED)

    response = await client.post("/bookings", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_booking_negative_room_id(client: AsyncClient, auth_headers, eligible_user):
    response = await client.post("/bookings", json={"roomId": -1}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_booking_room_not_found(client: AsyncClient, auth_headers, eligible_user, room):
    response = await client.post("/bookings", json={"roomId": room.id + 100}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_booking_full_room(
    client: AsyncClient, db_session, auth_headers, eligible_user, full_room
):
    """Full room is rejected and no row is inserted."""
    response = await client.post("/bookings", json={"roomId": full_room.id}, headers=auth_headers)
    assert response.status_code == 403
    assert await _booking_count(db_session, full_room.id) == 1


@pytest.mark.asyncio
async def test_create_booking(client: AsyncClient, db_session, auth_headers, eligible_user, room):
    response = await client.post("/bookings", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 200

    result = await db_session.execute(select(Booking).where(Booking.user_id == eligible_user.id))
    booking = result.scalar_one()
    assert response.json() == {"id": booking.id}
    assert booking.room_id == room.id


@pytest.mark.asyncio
async def test_create_second_booking_conflicts(
    client: AsyncClient, db_session, auth_headers, eligible_user, room, other_room
):
    """Same user booking twice returns 409 and keeps a single row."""
    first = await client.post("/bookings", json={"roomId": room.id}, headers=auth_headers)
    assert first.status_code == 200

    second = await client.post("/bookings", json={"roomId": other_room.id}, headers=auth_headers)
    assert second.status_code == 409
    assert await _booking_count(db_session) == 1


@pytest.mark.asyncio
async def test_create_booking_fills_room_to_capacity(client: AsyncClient, db_session, hotel):
    """A room of capacity 2 accepts two guests and rejects the third."""
    small_room = await factories.create_room(db_session, hotel, capacity=2)
    statuses = []
    for _ in range(3):
        guest = await factories.create_eligible_user(db_session)
        token = await factories.create_session_token(db_session, guest)
        response = await client.post(
            "/bookings",
            json={"roomId": small_room.id},
            headers={"Authorization": f"Bearer {token}"},
        )
        statuses.append(response.status_code)

    assert statuses == [200, 200, 403]
    assert await _booking_count(db_session, small_room.id) == 2


# PUT /bookings/{booking_id}

@pytest.mark.asyncio
async def test_update_booking_unauthenticated(client: AsyncClient):
    response = await client.put("/bookings/3", json={"roomId": 1})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_booking_non_numeric_id(client: AsyncClient, auth_headers):
    response = await client.put("/bookings/abc", json={"roomId": 1}, headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_booking_without_body(client: AsyncClient, auth_headers, user_booking):
    response = await client.put(f"/bookings/{user_booking.id}", headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_booking_boolean_room(
    client: AsyncClient, db_session, auth_headers, user_booking, room
):
    response = await client.put(
        f"/bookings/{user_booking.id}", json={"roomId": True}, headers=auth_headers
    )
    assert response.status_code == 400

    await db_session.refresh(user_booking)
    assert user_booking.room_id == room.id


@pytest.mark.asyncio
async def test_update_unknown_booking(client: AsyncClient, auth_headers, eligible_user, room):
    response = await client.put("/bookings/9999", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_other_users_booking(
    client: AsyncClient, db_session, auth_headers, eligible_user, room, other_room
):
    """Foreign booking returns 401 and keeps its room."""
    guest = await factories.create_eligible_user(db_session)
    foreign = await factories.create_booking(db_session, guest, room)

    response = await client.put(
        f"/bookings/{foreign.id}", json={"roomId": other_room.id}, headers=auth_headers
    )
    assert response.status_code == 401

    await db_session.refresh(foreign)
    assert foreign.room_id == room.id


@pytest.mark.asyncio
async def test_update_booking_owner_no_longer_eligible(
    client: AsyncClient, db_session, test_user, auth_headers, room, other_room
):
    await factories.create_eligible_user(db_session, user=test_user, status=TicketStatus.RESERVED)
    booking = await factories.create_booking(db_session, test_user, room)

    response = await client.put(
        f"/bookings/{booking.id}", json={"roomId": other_room.id}, headers=auth_headers
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_booking_invalid_room(client: AsyncClient, auth_headers, user_booking):
    response = await client.put(
        f"/bookings/{user_booking.id}", json={"roomId": -1}, headers=auth_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_booking_full_room(
    client: AsyncClient, db_session, auth_headers, user_booking, room, full_room
):
    response = await client.put(
        f"/bookings/{user_booking.id}", json={"roomId": full_room.id}, headers=auth_headers
    )
    assert response.status_code == 403

    await db_session.refresh(user_booking)
    assert user_booking.room_id == room.id
    assert await _booking_count(db_session, full_room.id) == 1


@pytest.mark.asyncio
async def test_update_booking(client: AsyncClient, auth_headers, user_booking, other_room):
    """Room change is visible on the next read."""
    response = await client.put(
        f"/bookings/{user_booking.id}", json={"roomId": other_room.id}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json() == {"id": user_booking.id}

    read = await client.get("/bookings", headers=auth_headers)
    assert read.status_code == 200
    assert read.json()["Room"]["id"] == other_room.id


@pytest.mark.asyncio
async def test_booking_scenario(client: AsyncClient, auth_headers, eligible_user, room, other_room):
    """Create, fail to create again, move rooms, read back."""
    created = await client.post("/bookings", json={"roomId": room.id}, headers=auth_headers)
    assert created.status_code == 200
    booking_id = created.json()["id"]

    again = await client.post("/bookings", json={"roomId": other_room.id}, headers=auth_headers)
    assert again.status_code == 409

    moved = await client.put(
        f"/bookings/{booking_id}", json={"roomId": other_room.id}, headers=auth_headers
    )
    assert moved.status_code == 200
    assert moved.json() == {"id": booking_id}

    read = await client.get("/bookings", headers=auth_headers)
    assert read.json()["id"] == booking_id
    assert read.json()["Room"]["id"] == other_room.id
