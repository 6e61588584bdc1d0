"""Tests for the typed backend operations."""

import json

import pytest

from walletgate.errors import UnknownOperationError
from walletgate.risk import RiskDecision, TransactionRequest, TxClassification

MIXED_ADDRESS = "0xAbCdEf0123456789ABCDEF0123456789abcdef01"
LOWER_ADDRESS = MIXED_ADDRESS.lower()
ORIGIN = "https://dapp.example"

TX = {
    "chainId": 1,
    "from": MIXED_ADDRESS,
    "to": "0x1111111111111111111111111111111111111111",
    "value": "0x0",
    "data": "0x",
    "gas": "0x5208",
    "gasPrice": "0x3b9aca00",
    "nonce": "0x1",
}

CHAIN = {
    "id": "eth",
    "community_id": 1,
    "name": "Ethereum",
    "native_token_id": "eth",
    "logo_url": "https://static.example/eth.png",
    "wrapped_token_id": "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
    "symbol": "ETH",
}

NATIVE_TOKEN = {
    "id": "eth",
    "chain": "eth",
    "name": "ETH",
    "symbol": "ETH",
    "display_symbol": None,
    "optimized_symbol": "ETH",
    "decimals": 18,
    "logo_url": "",
    "price": 3000.0,
    "is_verified": True,
    "is_core": True,
    "is_wallet": True,
    "time_at": 0,
}

GAS = {
    "estimated_gas_cost_usd_value": 1.2,
    "estimated_gas_cost_value": 0.0004,
    "estimated_gas_used": 21000,
    "estimated_seconds": 15,
    "front_tx_count": 0,
    "max_gas_cost_usd_value": 2.0,
    "max_gas_cost_value": 0.0006,
}

PASS_CHECK = {
    "decision": "pass",
    "alert": "",
    "warning_list": [],
    "danger_list": [],
    "forbidden_list": [],
}


def _sent_params(stub, path) -> dict:
    request = stub.last(path)
    if request.method == "GET":
        return dict(request.url.params)
    return json.loads(request.content)


class TestAddressNormalization:
    """Every operation taking an address sends it lower-cased."""

    @pytest.mark.asyncio
    async def test_recommend_chains(self, gateway, stub):
        stub.responses["/v1/wallet/recommend_chains"] = [CHAIN]

        chains = await gateway.operations.get_recommend_chains(MIXED_ADDRESS, ORIGIN)

        assert chains[0].community_id == 1
        sent = _sent_params(stub, "/v1/wallet/recommend_chains")
        assert sent == {"user_addr": LOWER_ADDRESS, "origin": ORIGIN}

    @pytest.mark.asyncio
    async def test_total_balance(self, gateway, stub):
        stub.responses["/v1/user/total_balance"] = {
            "total_usd_value": 12.5,
            "chain_list": [{**CHAIN, "usd_value": 12.5}],
        }

        balance = await gateway.operations.get_total_balance(MIXED_ADDRESS)

        assert balance.total_usd_value == 12.5
        assert balance.chains[0].usd_value == 12.5
        assert _sent_params(stub, "/v1/user/total_balance") == {"id": LOWER_ADDRESS}

    @pytest.mark.asyncio
    async def test_pending_count(self, gateway, stub):
        stub.responses["/v1/wallet/pending_tx_count"] = {
            "total_count": 2,
            "chains": [{**CHAIN, "pending_tx_count": 2}],
        }

        pending = await gateway.operations.get_pending_count(MIXED_ADDRESS)

        assert pending.total_count == 2
        assert _sent_params(stub, "/v1/wallet/pending_tx_count") == {"user_addr": LOWER_ADDRESS}

    @pytest.mark.asyncio
    async def test_check_origin(self, gateway, stub):
        stub.responses["/v1/wallet/security/check_origin"] = PASS_CHECK

        result = await gateway.operations.check_origin(MIXED_ADDRESS, ORIGIN)

        assert result.decision == RiskDecision.PASS
        sent = _sent_params(stub, "/v1/wallet/security/check_origin")
        assert sent["user_addr"] == LOWER_ADDRESS

    @pytest.mark.asyncio
    async def test_check_text(self, gateway, stub):
        stub.responses["/v1/wallet/check_text"] = PASS_CHECK

        await gateway.operations.check_text(MIXED_ADDRESS, ORIGIN, "Sign in")

        sent = _sent_params(stub, "/v1/wallet/check_text")
        assert sent == {"user_addr": LOWER_ADDRESS, "origin": ORIGIN, "text": "Sign in"}

    @pytest.mark.asyncio
    async def test_check_tx(self, gateway, stub):
        stub.responses["/v1/wallet/check_tx"] = PASS_CHECK

        await gateway.operations.check_tx(TX, ORIGIN, MIXED_ADDRESS)

        sent = _sent_params(stub, "/v1/wallet/check_tx")
        assert sent["user_addr"] == LOWER_ADDRESS
        assert sent["update_nonce"] is False
        assert sent["tx"]["gasPrice"] == "0x3b9aca00"

    @pytest.mark.asyncio
    async def test_explain_text(self, gateway, stub):
        stub.responses["/v1/wallet/api/explain_text"] = {"comment": "Login request"}

        explanation = await gateway.operations.explain_text(ORIGIN, MIXED_ADDRESS, "Sign in")

        assert explanation.comment == "Login request"
        assert _sent_params(stub, "/v1/wallet/api/explain_text")["user_addr"] == LOWER_ADDRESS


class TestSecurityChecks:
    """Tests for risk findings surfaced as data."""

    @pytest.mark.asyncio
    async def test_forbidden_is_a_result_not_an_error(self, gateway, stub):
        stub.responses["/v1/wallet/check_tx"] = {
            "decision": "forbidden",
            "alert": "Known phishing contract",
            "warning_list": [],
            "danger_list": [{"id": 2, "alert": "Unverified contract"}],
            "forbidden_list": [{"id": 9, "alert": "Phishing address"}],
        }

        result = await gateway.operations.check_tx(
            TransactionRequest.model_validate(TX), ORIGIN, MIXED_ADDRESS, update_nonce=True
        )

        assert result.decision == RiskDecision.FORBIDDEN
        assert [a.id for a in result.alerts] == [9, 2]
        assert _sent_params(stub, "/v1/wallet/check_tx")["update_nonce"] is True


class TestExplainTx:
    """Tests for transaction pre-execution."""

    @pytest.mark.asyncio
    async def test_failed_simulation_resolves(self, gateway, stub):
        stub.responses["/v1/wallet/explain_tx"] = {
            "gas": GAS,
            "native_token": NATIVE_TOKEN,
            "pre_exec": {
                "assets_change": [],
                "err_msg": "insufficient funds",
                "success": False,
                "tx_type": 1,
            },
            "tags": [],
            "tx": TX,
        }

        explanation = await gateway.operations.explain_tx(TX, ORIGIN, MIXED_ADDRESS)

        assert explanation.simulation.succeeded is False
        assert explanation.simulation.error_message == "insufficient funds"
        assert explanation.simulation.balance_changes == []
        sent = _sent_params(stub, "/v1/wallet/explain_tx")
        assert sent["user_addr"] == LOWER_ADDRESS
        assert sent["update_nonce"] is False

    @pytest.mark.asyncio
    async def test_successful_simulation(self, gateway, stub):
        stub.responses["/v1/wallet/explain_tx"] = {
            "gas": GAS,
            "native_token": NATIVE_TOKEN,
            "pre_exec": {
                "assets_change": [{**NATIVE_TOKEN, "amount": -0.1}],
                "err_msg": "",
                "success": True,
                "tx_type": 1,
            },
            "tags": ["transfer"],
            "tx": TX,
        }

        explanation = await gateway.operations.explain_tx(TX, ORIGIN, MIXED_ADDRESS)

        assert explanation.simulation.classified_type == TxClassification.SEND
        assert explanation.simulation.balance_changes[0].amount == -0.1
        assert explanation.gas_estimate.estimated_gas_used == 21000
        assert explanation.transaction.chain_id == 1
        assert explanation.tags == ["transfer"]


class TestGasAndBroadcast:
    """Tests for gas market and transaction push."""

    @pytest.mark.asyncio
    async def test_gas_market_without_custom_price(self, gateway, stub):
        stub.responses["/v1/wallet/gas_market"] = [
            {"level": "slow", "price": 10, "front_tx_count": 5, "estimated_seconds": 60},
            {"level": "fast", "price": 30, "front_tx_count": 0, "estimated_seconds": 15},
        ]

        levels = await gateway.operations.gas_market("eth")

        assert [level.level for level in levels] == ["slow", "fast"]
        assert _sent_params(stub, "/v1/wallet/gas_market") == {"chain_id": "eth"}

    @pytest.mark.asyncio
    async def test_gas_market_with_custom_price(self, gateway, stub):
        stub.responses["/v1/wallet/gas_market"] = []

        await gateway.operations.gas_market("bsc", custom_price=5000000000)

        sent = _sent_params(stub, "/v1/wallet/gas_market")
        assert sent == {"chain_id": "bsc", "custom_price": "5000000000"}

    @pytest.mark.asyncio
    async def test_push_tx_returns_identifier(self, gateway, stub):
        stub.responses["/v1/wallet/push_tx"] = {"req_id": "abc123"}
        signed = {**TX, "r": "0x01", "s": "0x02", "v": "0x25"}

        result = await gateway.operations.push_tx(signed)

        assert result == {"req_id": "abc123"}
        assert _sent_params(stub, "/v1/wallet/push_tx")["tx"]["v"] == "0x25"

    @pytest.mark.asyncio
    async def test_push_tx_forwards_transaction_unchanged(self, gateway, stub):
        stub.responses["/v1/wallet/push_tx"] = {"req_id": "abc124"}
        signed = {
            "chainId": 1,
            "from": MIXED_ADDRESS,
            "to": "0xbb",
            "gas": "0x5208",
            "nonce": "0x1",
            "maxFeePerGas": "0x10",
            "maxPriorityFeePerGas": "0x1",
            "type": "0x2",
            "r": "0x01",
            "s": "0x02",
            "v": "0x1",
        }

        await gateway.operations.push_tx(signed)

        assert _sent_params(stub, "/v1/wallet/push_tx")["tx"] == signed

    @pytest.mark.asyncio
    async def test_check_tx_accepts_integer_nonce(self, gateway, stub):
        stub.responses["/v1/wallet/check_tx"] = PASS_CHECK

        await gateway.operations.check_tx({**TX, "nonce": 5}, ORIGIN, MIXED_ADDRESS)

        assert _sent_params(stub, "/v1/wallet/check_tx")["tx"]["nonce"] == 5

    @pytest.mark.asyncio
    async def test_supported_chains(self, gateway, stub):
        stub.responses["/v1/wallet/supported_chains"] = [CHAIN]

        chains = await gateway.operations.get_supported_chains()

        assert chains[0].name == "Ethereum"

    @pytest.mark.asyncio
    async def test_explain_origin(self, gateway, stub):
        stub.responses["/v1/wallet/explain_origin"] = {"name": "Example dapp"}

        info = await gateway.operations.explain_origin(ORIGIN, title="Example")

        assert info == {"name": "Example dapp"}
        sent = _sent_params(stub, "/v1/wallet/explain_origin")
        assert sent == {"origin": ORIGIN, "title": "Example", "return_logo": "false"}


class TestMissingRoute:
    """Tests for operations absent from the route table."""

    @pytest.mark.asyncio
    async def test_unknown_route_raises(self, gateway, stub):
        stub.responses["/v1/wallet/config"] = {
            "check_origin": {"path": "/v1/wallet/security/check_origin", "method": "get"}
        }
        assert await gateway.refresh()

        with pytest.raises(UnknownOperationError):
            await gateway.operations.gas_market("eth")
