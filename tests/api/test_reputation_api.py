"""Reputation API endpoint tests"""

import pytest
from fastapi.testclient import TestClient

BILL = {
    "bill_id": "b1",
    "turn": 2,
    "position": {"cube": {"economic": 5}},
    "yes_votes": ["p1"],
}


class TestPlayers:
    def test_register_and_summary(self, client: TestClient):
        r = client.post("/reputation/players", json={"player_id": "p3"})
        assert r.status_code == 201

        r = client.get("/reputation/players/p3")
        assert r.status_code == 200
        data = r.json()
        assert data["overall_approval"] == 50.0
        assert data["by_province"] == {"canterbury": 50.0, "otago": 50.0}
        assert data["scores"] == []

    def test_unknown_player(self, client: TestClient):
        r = client.get("/reputation/players/ghost")
        assert r.status_code == 404
        assert "ghost" in r.json()["detail"]

    def test_score_default_without_creation(self, client: TestClient):
        r = client.get("/reputation/players/p1/slices/otago-miners")
        assert r.status_code == 200
        assert r.json()["approval"] == 50.0
        assert r.json()["history"] == []


class TestBills:
    def test_resolve_bill(self, client: TestClient):
        r = client.post("/reputation/bills", json=BILL)
        assert r.status_code == 200
        assert len(r.json()["changes"]) == 3

        score = client.get("/reputation/players/p1/slices/cant-farmers").json()
        assert score["approval"] == pytest.approx(52.0)
        assert score["history"][0]["change"] == pytest.approx(2.0)

        changes = client.get("/reputation/players/p1/changes").json()["changes"]
        assert {c["source"] for c in changes} == {"bill-vote-yes"}

    def test_replay_conflict(self, client: TestClient):
        client.post("/reputation/bills", json=BILL)
        r = client.post("/reputation/bills", json=BILL)
        assert r.status_code == 409

    def test_unknown_voter(self, client: TestClient):
        r = client.post("/reputation/bills", json={**BILL, "yes_votes": ["ghost"]})
        assert r.status_code == 404

    def test_double_ballot(self, client: TestClient):
        r = client.post("/reputation/bills", json={**BILL, "no_votes": ["p1"]})
        assert r.status_code == 400

    def test_preview(self, client: TestClient):
        r = client.post(
            "/reputation/bills/preview",
            json={"player_id": "p1", "position": {"cube": {"economic": 5}}, "limit": 2},
        )
        assert r.status_code == 200
        impacts = r.json()["impacts"]
        assert [i["slice_id"] for i in impacts] == ["otago-miners", "cant-farmers"]

    def test_preview_unknown_role(self, client: TestClient):
        r = client.post(
            "/reputation/bills/preview",
            json={"player_id": "p1", "position": {}, "role": "heckler"},
        )
        assert r.status_code == 400


class TestNewsAndScandals:
    def test_news(self, client: TestClient):
        r = client.post(
            "/reputation/news",
            json={
                "article_id": "n1",
                "turn": 1,
                "outlet_type": "ai-moderate",
                "impacts": [{"slice_id": "otago-miners", "player_id": "p2", "delta": 4}],
            },
        )
        assert r.status_code == 200
        # moderate outlet vs social -5: 1 - 5/20
        assert r.json()["changes"][0]["delta"] == pytest.approx(3.0)

    def test_unknown_outlet(self, client: TestClient):
        r = client.post(
            "/reputation/news",
            json={"article_id": "n1", "turn": 1, "outlet_type": "gazette"},
        )
        assert r.status_code == 400

    def test_scandal_positive_delta(self, client: TestClient):
        r = client.post(
            "/reputation/scandals",
            json={
                "scandal_id": "x1",
                "player_id": "p1",
                "turn": 1,
                "impacts": {"cant-farmers": 3},
            },
        )
        assert r.status_code == 400


class TestCampaignsAndEndorsements:
    def test_campaign_lifecycle(self, client: TestClient):
        r = client.post(
            "/reputation/campaigns",
            json={"player_id": "p1", "slice_id": "cant-farmers", "turn": 4},
        )
        assert r.status_code == 201
        campaign = r.json()
        assert campaign["end_turn"] == 16
        assert 1 <= campaign["boost"] <= 5
        assert campaign["money_cost"] == 100

        cancel_url = f"/reputation/campaigns/{campaign['campaign_id']}/cancel"
        r = client.post(cancel_url)
        assert r.json()["status"] == "cancelled"
        assert client.post(cancel_url).status_code == 400

    def test_unknown_campaign(self, client: TestClient):
        assert client.post("/reputation/campaigns/nope/cancel").status_code == 404

    def test_endorsement(self, client: TestClient):
        client.post(
            "/reputation/campaigns",
            json={"player_id": "p1", "slice_id": "cant-farmers", "turn": 1},
        )
        body = {"endorser_id": "p1", "endorsed_id": "p2", "turn": 2}

        preview = client.post("/reputation/endorsements/preview", json=body).json()
        assert preview["endorsement_id"] is None
        assert len(preview["transfers"]) == 1

        r = client.post("/reputation/endorsements", json=body)
        assert r.status_code == 201
        assert r.json()["endorsement_id"]
        assert client.post("/reputation/endorsements", json=body).status_code == 400

    def test_self_endorsement(self, client: TestClient):
        r = client.post(
            "/reputation/endorsements",
            json={"endorser_id": "p1", "endorsed_id": "p1", "turn": 2},
        )
        assert r.status_code == 400


class TestTurnsAndElections:
    def test_advance_turn(self, client: TestClient):
        r = client.post("/reputation/turns", json={"turn": 12})
        assert r.status_code == 200
        assert r.json()["update_type"] == "annual-data"

    def _create(self, client: TestClient):
        return client.post(
            "/reputation/elections",
            json={
                "election_id": "e1",
                "office_type": "parliament",
                "candidates": [{"player_id": "p1"}, {"player_id": "p2"}],
            },
        )

    def test_election_flow(self, client: TestClient):
        assert self._create(client).status_code == 201
        assert client.post("/reputation/elections/e1/open").json()["voting_open"]

        r = client.post(
            "/reputation/elections/e1/tally", json={"turn": 5, "base_turnout": 0.5}
        )
        assert r.status_code == 500

        client.post("/reputation/elections/e1/close", json={"turn": 5})
        r = client.post(
            "/reputation/elections/e1/tally", json={"turn": 5, "base_turnout": 0.5}
        )
        assert r.status_code == 200
        result = r.json()
        assert result["winner_id"] == "p1"
        assert result["total_eligible_voters"] == 3500
        assert result["total_votes_cast"] == 1750

    def test_duplicate_election(self, client: TestClient):
        self._create(client)
        assert self._create(client).status_code == 409

    def test_unknown_office(self, client: TestClient):
        r = client.post(
            "/reputation/elections",
            json={"election_id": "e1", "office_type": "emperor", "candidates": []},
        )
        assert r.status_code == 400

    def test_turnout_validation(self, client: TestClient):
        self._create(client)
        r = client.post(
            "/reputation/elections/e1/tally", json={"turn": 5, "base_turnout": 1.5}
        )
        assert r.status_code == 422
