from datetime import datetime, timedelta, timezone


def _as_utc(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def test_create_and_list_newest_first(client, auth_headers, new_conversation):
    headers = auth_headers()
    first = new_conversation(title="First")
    second = new_conversation(title="Second")

    rows = client.get("/api/v1/conversations", headers=headers).json()

    assert [r["id"] for r in rows] == [second, first]
    assert rows[0]["user_id"] == "user-1"


def test_default_title(client, auth_headers):
    resp = client.post("/api/v1/conversations", json={}, headers=auth_headers())
    assert resp.status_code == 201
    assert resp.json()["title"] == "New Conversation"


def test_new_message_moves_conversation_to_top(client, auth_headers, new_conversation):
    headers = auth_headers()
    older = new_conversation(title="Older")
    new_conversation(title="Newer")

    client.post("/api/v1/chat", json={"message": "bump", "conversationId": older}, headers=headers)

    rows = client.get("/api/v1/conversations", headers=headers).json()
    assert rows[0]["id"] == older


def test_rename(client, auth_headers, new_conversation):
    headers = auth_headers()
    conv_id = new_conversation()

    resp = client.patch(f"/api/v1/conversations/{conv_id}", json={"title": "Trip planning"}, headers=headers)

    assert resp.status_code == 200
    assert resp.json()["title"] == "Trip planning"


def test_rename_rejects_empty_title(client, auth_headers, new_conversation):
    conv_id = new_conversation()
    resp = client.patch(f"/api/v1/conversations/{conv_id}", json={"title": ""}, headers=auth_headers())
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_delete_removes_messages(client, auth_headers, new_conversation):
    headers = auth_headers()
    conv_id = new_conversation()
    client.post("/api/v1/chat", json={"message": "hi", "conversationId": conv_id}, headers=headers)

    resp = client.delete(f"/api/v1/conversations/{conv_id}", headers=headers)

    assert resp.json() == {"status": "deleted", "id": conv_id}
    assert client.get("/api/v1/conversations", headers=headers).json() == []
    assert client.get(f"/api/v1/conversations/{conv_id}/messages", headers=headers).status_code == 404


def test_conversations_are_private(client, auth_headers, new_conversation):
    conv_id = new_conversation("alice")
    bob = auth_headers("bob")

    assert client.get("/api/v1/conversations", headers=bob).json() == []
    assert client.get(f"/api/v1/conversations/{conv_id}/messages", headers=bob).status_code == 404
    assert client.patch(f"/api/v1/conversations/{conv_id}", json={"title": "x"}, headers=bob).status_code == 404
    assert client.delete(f"/api/v1/conversations/{conv_id}", headers=bob).status_code == 404
    assert len(client.get("/api/v1/conversations", headers=auth_headers("alice")).json()) == 1


def test_requires_credentials(client):
    assert client.get("/api/v1/conversations").status_code == 401


def test_timestamps_round_trip_as_utc(client, auth_headers, new_conversation):
    headers = auth_headers()
    before = datetime.now(timezone.utc)
    conv_id = new_conversation()
    client.post("/api/v1/chat", json={"message": "hi", "conversationId": conv_id}, headers=headers)
    after = datetime.now(timezone.utc)

    conv = client.get("/api/v1/conversations", headers=headers).json()[0]
    created, updated = _as_utc(conv["created_at"]), _as_utc(conv["updated_at"])
    slack = timedelta(seconds=1)
    assert before - slack <= created <= updated <= after + slack
    for msg in client.get(f"/api/v1/conversations/{conv_id}/messages", headers=headers).json():
        assert before - slack <= _as_utc(msg["created_at"]) <= after + slack
