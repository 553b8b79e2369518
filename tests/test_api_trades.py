"""Tests for potential trade API endpoints."""

import pytest
from httpx import AsyncClient


async def propose(client: AsyncClient, user_id: str, card_id: str, kind: str) -> str:
    response = await client.post(
        f"/proposals/{user_id}", json={"set": "A1", "id": card_id, "type": kind}
    )
    assert response.status_code == 201
    return response.json()["key"]


def as_user(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


def trade_keys(trade: dict) -> dict[str, str]:
    return {
        "counterparty_id": trade["counterparty_id"],
        "my_offer_key": trade["my_offer"]["key"],
        "my_request_key": trade["my_request"]["key"],
        "their_offer_key": trade["their_offer"]["key"],
        "their_request_key": trade["their_request"]["key"],
    }


@pytest.fixture
async def pool(client: AsyncClient) -> AsyncClient:
    """Ash and Misty each hold what the other wants; Brock wants something nobody has."""
    await client.put("/users/ash", json={"display_name": "Ash Ketchum"})
    await client.put("/users/misty", json={"display_name": "Misty Waterflower"})
    await client.put("/users/brock", json={"display_name": "Brock"})
    await propose(client, "ash", "1", "offer")
    await propose(client, "ash", "2", "request")
    await propose(client, "misty", "2", "offer")
    await propose(client, "misty", "1", "request")
    await propose(client, "brock", "1", "offer")
    await propose(client, "brock", "6", "request")
    return client


class TestListPotentialTrades:
    async def test_signed_out(self, pool: AsyncClient) -> None:
        response = await pool.get("/trades")

        assert response.status_code == 200
        assert response.json() == {"user_id": None, "trades": [], "count": 0}

    async def test_reciprocal_trade(self, pool: AsyncClient) -> None:
        ash = (await pool.get("/trades", headers=as_user("ash"))).json()
        misty = (await pool.get("/trades", headers=as_user("misty"))).json()

        assert ash["count"] == 1
        trade = ash["trades"][0]
        assert trade["counterparty_id"] == "misty"
        assert trade["counterparty_display_name"] == "Misty"
        assert trade["my_offer"]["card"]["name"] == "Bulbasaur"
        assert trade["their_offer"]["card"]["name"] == "Ivysaur"

        assert misty["count"] == 1
        assert misty["trades"][0]["counterparty_display_name"] == "Ash"

    async def test_no_match(self, pool: AsyncClient) -> None:
        brock = (await pool.get("/trades", headers=as_user("brock"))).json()

        assert brock == {"user_id": "brock", "trades": [], "count": 0}

    async def test_counterparty_without_directory_entry(self, client: AsyncClient) -> None:
        await propose(client, "ash", "1", "offer")
        await propose(client, "ash", "2", "request")
        await propose(client, "ghost", "2", "offer")
        await propose(client, "ghost", "1", "request")

        data = (await client.get("/trades", headers=as_user("ash"))).json()

        assert data["trades"][0]["counterparty_display_name"] == "unknown"

    async def test_filters(self, pool: AsyncClient) -> None:
        headers = as_user("ash")

        by_player = (await pool.get("/trades", params={"player": "Misty"}, headers=headers)).json()
        by_other = (await pool.get("/trades", params={"player": "Brock"}, headers=headers)).json()
        by_set = (await pool.get("/trades", params={"set": "A1a"}, headers=headers)).json()
        by_rarity = (await pool.get("/trades", params={"rarity": "◊"}, headers=headers)).json()

        assert by_player["count"] == 1
        assert by_other["count"] == 0
        assert by_set["count"] == 0
        assert by_rarity["count"] == 1


class TestTradeFlow:
    async def test_propose_and_accept(self, pool: AsyncClient) -> None:
        headers = as_user("ash")
        trade = (await pool.get("/trades", headers=headers)).json()["trades"][0]

        proposed = await pool.post("/trades/propose", json=trade_keys(trade), headers=headers)

        assert proposed.status_code == 200
        confirmation = proposed.json()
        assert confirmation["prompt"] == "Trade your Bulbasaur for Misty's Ivysaur?"

        # Nothing is deleted until confirmed
        assert (await pool.get("/trades", headers=headers)).json()["count"] == 1

        confirmed = await pool.post(
            f"/trades/confirm/{confirmation['token']}", json={"accept": True}, headers=headers
        )

        assert confirmed.status_code == 200
        assert confirmed.json() == {
            "token": confirmation["token"],
            "status": "completed",
            "deleted": 4,
            "already_absent": 0,
        }
        assert (await pool.get("/trades", headers=headers)).json()["count"] == 0
        assert (await pool.get("/trades", headers=as_user("misty"))).json()["count"] == 0
        # Brock's proposals are untouched
        brock = (await pool.get("/proposals/brock")).json()
        assert len(brock["offers"]) == 1
        assert len(brock["requests"]) == 1

    async def test_decline(self, pool: AsyncClient) -> None:
        headers = as_user("ash")
        trade = (await pool.get("/trades", headers=headers)).json()["trades"][0]
        token = (
            await pool.post("/trades/propose", json=trade_keys(trade), headers=headers)
        ).json()["token"]

        declined = await pool.post(
            f"/trades/confirm/{token}", json={"accept": False}, headers=headers
        )

        assert declined.json()["status"] == "declined"
        assert declined.json()["deleted"] == 0
        assert (await pool.get("/trades", headers=headers)).json()["count"] == 1

    async def test_stale_trade(self, pool: AsyncClient) -> None:
        headers = as_user("ash")
        trade = (await pool.get("/trades", headers=headers)).json()["trades"][0]
        await pool.delete(f"/proposals/misty/{trade['their_offer']['key']}")

        response = await pool.post("/trades/propose", json=trade_keys(trade), headers=headers)

        assert response.status_code == 409
        assert response.json()["kind"] == "stale_reference"

    async def test_propose_signed_out(self, pool: AsyncClient) -> None:
        trade = (await pool.get("/trades", headers=as_user("ash"))).json()["trades"][0]

        response = await pool.post("/trades/propose", json=trade_keys(trade))

        assert response.status_code == 409

    async def test_proposal_withdrawn_before_confirm(self, pool: AsyncClient) -> None:
        headers = as_user("ash")
        trade = (await pool.get("/trades", headers=headers)).json()["trades"][0]
        token = (
            await pool.post("/trades/propose", json=trade_keys(trade), headers=headers)
        ).json()["token"]
        await pool.delete(f"/proposals/misty/{trade['their_request']['key']}")

        confirmed = await pool.post(
            f"/trades/confirm/{token}", json={"accept": True}, headers=headers
        )

        assert confirmed.json()["status"] == "completed"
        assert confirmed.json()["deleted"] == 3
        assert confirmed.json()["already_absent"] == 1

    async def test_unknown_token(self, pool: AsyncClient) -> None:
        response = await pool.post(
            "/trades/confirm/nope", json={"accept": True}, headers=as_user("ash")
        )

        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"

    @pytest.mark.parametrize("caller", ["brock", "misty"])
    async def test_only_initiator_can_confirm(self, pool: AsyncClient, caller: str) -> None:
        """Neither an outsider nor the counterparty can answer ash's trade."""
        headers = as_user("ash")
        trade = (await pool.get("/trades", headers=headers)).json()["trades"][0]
        token = (
            await pool.post("/trades/propose", json=trade_keys(trade), headers=headers)
        ).json()["token"]

        response = await pool.post(
            f"/trades/confirm/{token}", json={"accept": True}, headers=as_user(caller)
        )

        assert response.status_code == 403
        assert response.json()["kind"] == "not_trade_party"
        ash = (await pool.get("/proposals/ash")).json()
        assert len(ash["offers"]) == 1
        assert len(ash["requests"]) == 1

        # The initiator can still answer afterwards
        confirmed = await pool.post(
            f"/trades/confirm/{token}", json={"accept": True}, headers=headers
        )
        assert confirmed.json()["status"] == "completed"

    async def test_confirm_signed_out(self, pool: AsyncClient) -> None:
        headers = as_user("ash")
        trade = (await pool.get("/trades", headers=headers)).json()["trades"][0]
        token = (
            await pool.post("/trades/propose", json=trade_keys(trade), headers=headers)
        ).json()["token"]

        response = await pool.post(f"/trades/confirm/{token}", json={"accept": False})

        assert response.status_code == 403
        assert (await pool.get("/trades", headers=headers)).json()["count"] == 1

    async def test_resume_with_nothing_pending(self, pool: AsyncClient) -> None:
        response = await pool.post("/trades/resume")

        assert response.status_code == 200
        assert response.json() == []
