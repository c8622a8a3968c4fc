"""Chat completion, conversation log and prompt assembly."""
from conftest import AUTH, USER_ID
from sukejuru.config import app_cfg
from sukejuru.constants import NO_REPLY_FALLBACK
from sukejuru.db.events.crud import create_events
from sukejuru.db.messages.crud import append_messages, get_messages_by_user_id
from sukejuru.utils.app_utils import parse_datetime


def test_chat_reply_is_returned_and_stored(client, completions):
    completions.reply = '{"action": "create", "events": []}'

    response = client.post("/api/chat", headers=AUTH, json={"message": "add gym on monday"})

    assert response.status_code == 200
    assert response.json() == {"reply": '{"action": "create", "events": []}'}

    [call] = completions.calls
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == 0.4
    assert call["messages"][0]["role"] == "system"
    assert call["messages"][-1] == {"role": "user", "content": "add gym on monday"}

    history = get_messages_by_user_id(USER_ID)
    assert [(m.role, m.content) for m in history] == [
        ("user", "add gym on monday"),
        ("assistant", '{"action": "create", "events": []}'),
    ]


def test_prompt_carries_history_events_and_courses(client, completions):
    append_messages(USER_ID, [("user", "I take MoM this term"), ("assistant", "Noted!")])
    create_events(USER_ID, [{
        "title": "Soccer practice",
        "start_date": parse_datetime("2025-09-22T16:00:00"),
        "end_date": parse_datetime("2025-09-22T18:00:00"),
    }])

    client.post("/api/chat", headers=AUTH, json={"message": "what is on monday?"})

    messages = completions.calls[0]["messages"]
    assert messages[1:3] == [
        {"role": "user", "content": "I take MoM this term"},
        {"role": "assistant", "content": "Noted!"},
    ]
    system_prompt = messages[0]["content"]
    assert "Soccer practice" in system_prompt
    assert "Mechanics of Materials" in system_prompt
    assert "Fall 2025" in system_prompt


def test_empty_completion_falls_back(client, completions):
    completions.reply = None

    response = client.post("/api/chat", headers=AUTH, json={"message": "hello"})

    assert response.json() == {"reply": NO_REPLY_FALLBACK}


def test_provider_error_is_relayed(client, completions):
    completions.error = RuntimeError("Rate limit reached for gpt-4o-mini")

    response = client.post("/api/chat", headers=AUTH, json={"message": "hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "Rate limit reached for gpt-4o-mini"}
    assert get_messages_by_user_id(USER_ID) == []


def test_empty_message_is_rejected(client, completions):
    response = client.post("/api/chat", headers=AUTH, json={"message": ""})

    assert response.status_code == 400
    assert completions.calls == []


def test_memory_and_history(client):
    assert client.post("/api/memory", headers=AUTH, json={"role": "user", "content": "first"}).json() == {"ok": True}
    client.post("/api/memory", headers=AUTH, json={"role": "assistant", "content": "second", "session_id": "tab-1"})
    client.post("/api/memory", headers=AUTH, json={"role": "user", "content": "third"})

    messages = client.get("/api/chat/history", headers=AUTH).json()["messages"]
    assert [m["content"] for m in messages] == ["first", "second", "third"]
    assert messages[1]["session_id"] == "tab-1"
    assert messages[0]["created_at"].endswith("Z")

    recent = client.get("/api/chat/history?limit=2", headers=AUTH).json()["messages"]
    assert [m["content"] for m in recent] == ["second", "third"]


def test_memory_rejects_unknown_role(client):
    response = client.post("/api/memory", headers=AUTH, json={"role": "robot", "content": "beep"})

    assert response.status_code == 400


def test_recent_turns_follow_history_limit(client, completions, monkeypatch):
    append_messages(USER_ID, [("user", "one"), ("assistant", "two"), ("user", "three")])
    monkeypatch.setattr(app_cfg, "CHAT_HISTORY_LIMIT", 2)

    client.post("/api/chat", headers=AUTH, json={"message": "four"})

    replayed = [m["content"] for m in completions.calls[0]["messages"][1:]]
    assert replayed == ["two", "three", "four"]


def test_zero_history_limit_replays_no_turns(client, completions, monkeypatch):
    append_messages(USER_ID, [("user", "one"), ("assistant", "two")])
    monkeypatch.setattr(app_cfg, "CHAT_HISTORY_LIMIT", 0)

    client.post("/api/chat", headers=AUTH, json={"message": "three"})

    [call] = completions.calls
    assert [m["role"] for m in call["messages"]] == ["system", "user"]
    assert call["messages"][-1]["content"] == "three"
