from urllib.parse import parse_qs, urlsplit

import pytest
import responses

from tgspeedtest.telegram_client import (
    Chat,
    IncomingMessage,
    Sender,
    TelegramClient,
    TelegramError,
    Update,
)

BASE = "https://api.telegram.org/bottoken/"


@pytest.fixture
def rsps():
    with responses.RequestsMock() as mock:
        yield mock


@pytest.fixture
def client():
    return TelegramClient("api.telegram.org", "token")


def _query(call):
    return parse_qs(urlsplit(call.request.url).query, keep_blank_values=True)


def test_update_from_dict_full():
    update = Update.from_dict(
        {
            "update_id": 5,
            "message": {"text": "/start", "from": {"username": "alice"}, "chat": {"id": 77}},
        }
    )
    assert update == Update(5, IncomingMessage("/start", Sender("alice"), Chat(77)))


def test_update_without_message():
    assert Update.from_dict({"update_id": 3}).message is None


def test_update_message_missing_fields_default():
    update = Update.from_dict({"update_id": 1, "message": {}})
    assert update.message == IncomingMessage("", Sender(""), Chat(0))


def test_update_rejects_non_object():
    with pytest.raises(ValueError):
        Update.from_dict("nope")


def test_updates_sends_offset_and_limit(rsps, client):
    rsps.add(
        responses.GET,
        BASE + "getUpdates",
        json={
            "ok": True,
            "result": [
                {"update_id": 10, "message": {"text": "/help", "chat": {"id": 1}}},
                {"update_id": 11},
            ],
        },
    )
    result = client.updates(10, 100)
    assert [u.id for u in result] == [10, 11]
    assert result[0].message.text == "/help"
    assert result[1].message is None
    query = _query(rsps.calls[0])
    assert query == {"offset": ["10"], "limit": ["100"]}


def test_updates_null_result_is_empty(rsps, client):
    rsps.add(responses.GET, BASE + "getUpdates", json={"ok": True, "result": None})
    assert client.updates(0, 1) == []


def test_updates_bad_json(rsps, client):
    rsps.add(responses.GET, BASE + "getUpdates", body="<html>")
    with pytest.raises(TelegramError, match="Unmarshall"):
        client.updates(0, 1)


def test_send_message_ok(rsps, client):
    rsps.add(responses.GET, BASE + "sendMessage", json={"ok": True, "result": {}})
    assert client.send_message(42, "hello world") is None
    query = _query(rsps.calls[0])
    assert query == {"chat_id": ["42"], "text": ["hello world"]}


def test_send_message_api_error(rsps, client):
    rsps.add(
        responses.GET,
        BASE + "sendMessage",
        status=400,
        json={"ok": False, "description": "Bad Request: chat not found"},
    )
    with pytest.raises(TelegramError, match="Telegram API error: Bad Request: chat not found"):
        client.send_message(1, "hi")


def test_send_message_unparsable(rsps, client):
    rsps.add(responses.GET, BASE + "sendMessage", body="garbage")
    with pytest.raises(TelegramError, match="can't parse Telegram response"):
        client.send_message(1, "hi")


def test_connection_failure_raises(rsps, client):
    with pytest.raises(TelegramError):
        client.updates(0, 1)