import pytest

from app import socketio


def connect(app, http=None):
    client = socketio.test_client(app, flask_test_client=http)
    received = client.get_received()
    assert received[0]["name"] == "connected"
    assert received[0]["args"][0] == {"max_guesses": 10, "word_length": 5}
    return client


@pytest.fixture
def http(client):
    # the session cookie is set by the first game started over HTTP
    client.post("/api/new-game")
    return client


def test_socket_game(app, http):
    sock = connect(app, http)

    sock.emit("new_game")
    [event] = sock.get_received()
    assert event["name"] == "game_state"
    assert event["args"][0]["status"] == "in_progress"

    sock.emit("submit_guess", {"guess": "trace"})
    [event] = sock.get_received()
    assert event["name"] == "guess_feedback"
    assert event["args"][0]["guess"] == {"word": "TRACE", "exact": 3, "misplaced": 1}

    sock.emit("submit_guess", {"guess": "crane"})
    [event] = sock.get_received()
    payload = event["args"][0]
    assert payload["status"] == "won"
    assert payload["secret"] == "CRANE"


def test_socket_and_http_share_the_game(app, http):
    sock = connect(app, http)

    sock.emit("submit_guess", {"guess": "trace"})
    sock.get_received()

    state = http.get("/api/state").get_json()
    assert state["guesses"] == [{"word": "TRACE", "exact": 3, "misplaced": 1}]
    assert state["attempts_left"] == 9

    sock.emit("submit_guess", {"guess": "crane"})
    sock.get_received()

    response = http.post("/api/guess", json={"guess": "ghost"})
    assert response.status_code == 400
    assert response.get_json()["code"] == "game_over"


def test_socket_guess_without_game(app):
    sock = connect(app)

    sock.emit("submit_guess", {"guess": "crane"})
    [event] = sock.get_received()
    assert event["name"] == "guess_error"
    assert event["args"][0]["code"] == "no_game"


def test_socket_guess_error(app, http):
    sock = connect(app, http)

    sock.emit("submit_guess", {"guess": "apple"})
    [event] = sock.get_received()
    assert event["name"] == "guess_error"
    assert event["args"][0] == {"error": "Duplicate letters not allowed", "code": "duplicate_letters"}


@pytest.mark.parametrize("payload", ["crane", ["crane"], {"guess": 12345}])
def test_socket_malformed_payload(app, http, payload):
    sock = connect(app, http)

    sock.emit("submit_guess", payload)
    [event] = sock.get_received()
    assert event["name"] == "guess_error"
    assert event["args"][0]["code"] == "invalid_format"
    assert http.get("/api/state").get_json()["guesses"] == []


def test_socket_reset(app, http):
    sock = connect(app, http)

    sock.emit("submit_guess", {"guess": "trace"})
    sock.get_received()

    sock.emit("reset_game")
    [event] = sock.get_received()
    assert event["name"] == "game_state"
    assert event["args"][0]["guesses"] == []
    assert http.get("/api/state").get_json()["guesses"] == []
