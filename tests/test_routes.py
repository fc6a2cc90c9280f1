import pytest
from sqlalchemy.exc import OperationalError

from app.services import draft as draft_svc

LEAGUE = "default"


def _pick(client, manager, owner, cadence, slot_index, league=LEAGUE):
    return client.post(
        f"/draft/{league}/picks",
        json={"owner_id": owner, "cadence": cadence, "slot_index": slot_index},
        headers={"X-Manager-Id": manager},
    )


@pytest.fixture
def league(client):
    for uid in ("alex", "bob"):
        assert client.post(f"/league/{LEAGUE}/members", json={"user_id": uid}).status_code == 200
    return LEAGUE


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_state_before_start(client, league):
    body = client.get(f"/draft/{league}/state").json()
    assert body["status"] == "not_started"
    assert body["pick_number"] == 0
    assert body["pick_deadline"] is None
    assert body["roster"] == ["alex", "bob"]


def test_start_then_scenario(client, league):
    r = client.post(f"/draft/{league}/start")
    assert r.status_code == 200
    assert r.json()["status"] == "active"
    assert r.json()["on_the_clock"] == "alex"
    assert client.get(f"/draft/{league}/picks").json() == []

    r = _pick(client, "bob", "bob", "weekly", 0)
    assert r.status_code == 403
    assert r.json()["detail"]["reason"] == "not_your_turn"

    r = _pick(client, "alex", "alex", "weekly", 0)
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["autopicked"] is False
    assert body["pick"]["pick_number"] == 0
    assert body["state"]["pick_number"] == 1
    assert body["state"]["on_the_clock"] == "bob"

    r = _pick(client, "alex", "bob", "weekly", 0)
    assert r.status_code == 403
    assert r.json()["detail"]["reason"] == "not_your_turn"

    r = _pick(client, "bob", "alex", "weekly", 0)
    assert r.status_code == 409
    assert r.json()["detail"]["reason"] == "already_drafted"


def test_manager_id_by_query(client, league):
    client.post(f"/draft/{league}/start")
    r = client.post(
        f"/draft/{league}/picks?manager_id=alex",
        json={"owner_id": "bob", "cadence": "yearly", "slot_index": 1},
    )
    assert r.status_code == 200
    assert r.json()["pick"]["drafted_user_id"] == "bob"


def test_pick_requires_manager(client, league):
    client.post(f"/draft/{league}/start")
    r = client.post(f"/draft/{league}/picks", json={"owner_id": "alex", "cadence": "weekly", "slot_index": 0})
    assert r.status_code == 400


def test_unknown_slot(client, league):
    client.post(f"/draft/{league}/start")
    r = _pick(client, "alex", "alex", "monthly", 2)
    assert r.status_code == 400
    assert r.json()["detail"]["reason"] == "unknown_slot"


def test_autopick_not_started(client, league):
    r = client.post(f"/draft/{league}/autopick")
    assert r.status_code == 409
    assert r.json()["detail"] == {"reason": "not_active", "message": "Draft is not running. Start it first."}


def test_autopick_not_expired(client, league):
    client.post(f"/draft/{league}/start")
    r = client.post(f"/draft/{league}/autopick?only_if_expired=true")
    assert r.status_code == 409
    assert r.json()["detail"]["reason"] == "not_expired"


def test_full_draft_over_http(client, league):
    client.post(f"/draft/{league}/start")
    for _ in range(14):
        r = client.post(f"/draft/{league}/autopick")
        assert r.status_code == 200
        assert r.json()["autopicked"] is True

    state = client.get(f"/draft/{league}/state").json()
    assert state["status"] == "done"
    assert state["pick_number"] == 14
    assert state["pick_deadline"] is None

    picks = client.get(f"/draft/{league}/picks").json()
    assert [p["pick_number"] for p in picks] == list(range(14))

    r = client.post(f"/draft/{league}/autopick")
    assert r.status_code == 409
    assert r.json()["detail"]["reason"] == "not_active"


def test_start_empty_league(client):
    r = client.post("/draft/empty/start")
    assert r.status_code == 400
    assert r.json()["detail"]["reason"] == "empty_roster"


def test_members_locked_while_drafting(client, league):
    client.post(f"/draft/{league}/start")
    r = client.post(f"/league/{league}/members", json={"user_id": "carol"})
    assert r.status_code == 409
    assert r.json()["detail"]["reason"] == "roster_locked"
    r = client.delete(f"/league/{league}/members/bob")
    assert r.status_code == 409


def test_members_add_remove(client, league):
    r = client.post(f"/league/{league}/members", json={"user_id": "alex"})
    assert r.json()["members"] == ["alex", "bob"]
    r = client.delete(f"/league/{league}/members/bob")
    assert r.json()["members"] == ["alex"]
    assert client.get(f"/league/{league}/members").json()["members"] == ["alex"]


def test_slot_catalogue_and_titles(client, league):
    r = client.put("/goals/bob/monthly/1", json={"title": "Call grandma"})
    assert r.status_code == 200
    assert r.json()["title"] == "Call grandma"

    body = client.get(f"/league/{league}/slots").json()
    assert body["slot_counts"] == {"weekly": 3, "monthly": 2, "yearly": 2}
    assert len(body["items"]) == 14
    assert body["items"][0] == {"owner_id": "alex", "cadence": "weekly", "slot_index": 0, "title": "(goal slot 1)"}
    titled = [i for i in body["items"] if i["owner_id"] == "bob" and i["cadence"] == "monthly" and i["slot_index"] == 1]
    assert titled[0]["title"] == "Call grandma"


def test_goal_title_validation(client):
    assert client.put("/goals/bob/weekly/3", json={"title": "x"}).status_code == 400
    assert client.put("/goals/bob/daily/0", json={"title": "x"}).status_code == 422


def test_board_order_and_team(client, league):
    client.post(f"/draft/{league}/start")
    _pick(client, "alex", "bob", "yearly", 0)
    _pick(client, "bob", "alex", "weekly", 2)
    _pick(client, "bob", "alex", "weekly", 1)

    board = client.get(f"/draft/{league}/board").json()
    assert board["status"] == "active"
    yearly = {(i["owner_id"], i["slot_index"]): i for i in board["groups"]["yearly"]}
    assert yearly[("bob", 0)]["drafted"] is True
    assert yearly[("bob", 0)]["drafted_by"] == "alex"
    assert yearly[("alex", 0)]["drafted"] is False
    assert len(board["groups"]["weekly"]) == 6

    order = client.get(f"/draft/{league}/order").json()
    assert len(order) == 14
    assert [r["manager_id"] for r in order[:4]] == ["alex", "bob", "bob", "alex"]
    assert order[0]["pick"]["drafted_user_id"] == "bob"
    assert order[3]["is_current"] is True
    assert order[3]["pick"] is None

    team = client.get(f"/draft/{league}/team/bob").json()
    weekly = [s for s in team["slots"] if s["cadence"] == "weekly"]
    assert [s["filled"] for s in weekly] == [True, True, False]
    assert weekly[0]["owner_id"] == "alex"
    assert weekly[0]["pick_number"] == 1
    assert team["remaining"] == {"weekly": 1, "monthly": 2, "yearly": 2}


def test_backend_unavailable(client, league, monkeypatch):
    def _down(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(draft_svc, "get_state", _down)
    r = client.get(f"/draft/{league}/state")
    assert r.status_code == 503
    assert r.json()["detail"]["reason"] == "backend_unavailable"


def test_off_turn_negative_slot_is_not_your_turn(client, league):
    client.post(f"/draft/{league}/start")
    r = _pick(client, "bob", "alex", "weekly", -1)
    assert r.status_code == 403
    assert r.json()["detail"]["reason"] == "not_your_turn"


def test_negative_slot_on_turn_is_unknown_slot(client, league):
    client.post(f"/draft/{league}/start")
    r = _pick(client, "alex", "alex", "weekly", -1)
    assert r.status_code == 400
    assert r.json()["detail"]["reason"] == "unknown_slot"
