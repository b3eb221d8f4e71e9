"""
Unit tests for quote adapters.

Contract calls are mocked at the ``contract.functions.<fn>(...).call`` level.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from quote_probe.adapters import (
    StableSwapQuoter,
    V2RouterQuoter,
    V3Quoter,
    encode_v3_path,
    normalize_amount_out,
)
from quote_probe.adapters.base import error_reason, is_rate_limit_error
from quote_probe.adapters.stableswap import MAX_INT256
from quote_probe.exceptions import QuoteFailed
from quote_probe.types import Leg, Protocol

from conftest import BUSD, USDC, USDT, WBNB

ROUTER = "0x10ED43C718714eb63d5aA57B78B54704E256024E"
QUOTER = "0xB048Bbc1Ee6b733FFfCFb9e9CeF7375518e25997"
POOL = "0x312Bc7eAAF93f1C60Dc5AfC115FcCDE161055fb0"


def mock_web3(*contracts):
    """Web3 double whose eth.contract() hands out the given contracts in order."""
    web3 = MagicMock()
    web3.eth.contract.side_effect = list(contracts)
    return web3


class TestNormalizeAmountOut:
    def test_bare_int(self):
        assert normalize_amount_out(42, Protocol.V3) == 42

    def test_tuple_takes_first_element(self):
        assert normalize_amount_out((500, 123, 1, 90000), Protocol.V3) == 500
        assert normalize_amount_out([7, 1], Protocol.STABLE) == 7

    def test_mapping_and_record(self):
        assert normalize_amount_out({"amountOut": 9}, Protocol.V3) == 9
        assert normalize_amount_out(SimpleNamespace(amountOut=11), Protocol.V3) == 11

    @pytest.mark.parametrize("bad", ["100", None, -1, True, (), {"amount": 1}])
    def test_malformed_results_raise(self, bad):
        with pytest.raises(QuoteFailed):
            normalize_amount_out(bad, Protocol.V3)


class TestErrorHelpers:
    def test_rate_limit_markers(self):
        assert is_rate_limit_error(Exception("429 Client Error"))
        assert is_rate_limit_error(Exception("Too Many Requests"))
        assert is_rate_limit_error(Exception("{'code': -32005, 'message': 'x'}"))
        assert is_rate_limit_error(Exception("daily request limit exceeded"))
        assert not is_rate_limit_error(Exception("execution reverted"))

    def test_error_reason_prefers_message_attribute(self):
        err = Exception("('execution reverted: SPL', '0x')")
        err.message = "execution reverted: SPL"
        assert error_reason(err) == "execution reverted: SPL"
        assert error_reason(ValueError("plain")) == "plain"
        assert error_reason(RuntimeError()) == "RuntimeError"


class TestEncodeV3Path:
    def test_single_hop_layout(self):
        encoded = encode_v3_path([WBNB.address, USDT.address], [500])

        assert len(encoded) == 43
        assert encoded[:20] == bytes.fromhex("bb" * 20)
        assert encoded[20:23] == (500).to_bytes(3, "big")
        assert encoded[23:] == bytes.fromhex("55" * 20)

    def test_multi_hop_length(self):
        encoded = encode_v3_path(
            [WBNB.address, USDT.address, BUSD.address], [100, 2500]
        )
        assert len(encoded) == 20 + 3 + 20 + 3 + 20

    def test_mismatched_counts(self):
        with pytest.raises(ValueError):
            encode_v3_path([WBNB.address, USDT.address], [100, 500])

    def test_fee_out_of_range(self):
        with pytest.raises(ValueError):
            encode_v3_path([WBNB.address, USDT.address], [2**24])


class TestV2RouterQuoter:
    @pytest.mark.asyncio
    async def test_returns_last_amount(self):
        router = MagicMock()
        router.functions.getAmountsOut.return_value.call.return_value = [
            1000,
            2000,
            1990,
            1003,
        ]
        quoter = V2RouterQuoter(mock_web3(router), ROUTER)
        leg = Leg(Protocol.V2, (WBNB, USDT, BUSD, WBNB))

        assert await quoter.quote(1000, leg) == 1003
        router.functions.getAmountsOut.assert_called_once_with(
            1000, [WBNB.address, USDT.address, BUSD.address, WBNB.address]
        )

    @pytest.mark.asyncio
    async def test_calls_against_pending_block(self):
        router = MagicMock()
        call = router.functions.getAmountsOut.return_value.call
        call.return_value = [1, 2]
        quoter = V2RouterQuoter(mock_web3(router), ROUTER)

        await quoter.quote(1, Leg(Protocol.V2, (WBNB, USDT)))

        call.assert_called_once_with(block_identifier="pending")

    @pytest.mark.asyncio
    async def test_revert_becomes_quote_failed(self):
        router = MagicMock()
        router.functions.getAmountsOut.return_value.call.side_effect = Exception(
            "execution reverted: PancakeLibrary: INSUFFICIENT_LIQUIDITY"
        )
        quoter = V2RouterQuoter(mock_web3(router), ROUTER)

        with pytest.raises(QuoteFailed) as exc_info:
            await quoter.quote(1000, Leg(Protocol.V2, (WBNB, USDT)))

        assert exc_info.value.message.startswith("V2 quote failed:")
        assert "INSUFFICIENT_LIQUIDITY" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_wrong_length_result(self):
        router = MagicMock()
        router.functions.getAmountsOut.return_value.call.return_value = [1000]
        quoter = V2RouterQuoter(mock_web3(router), ROUTER)

        with pytest.raises(QuoteFailed):
            await quoter.quote(1000, Leg(Protocol.V2, (WBNB, USDT)))

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self):
        router = MagicMock()
        call = router.functions.getAmountsOut.return_value.call
        call.side_effect = [Exception("429 Too Many Requests"), [1000, 990]]
        quoter = V2RouterQuoter(mock_web3(router), ROUTER, backoff_sec=0)

        assert await quoter.quote(1000, Leg(Protocol.V2, (WBNB, USDT))) == 990
        assert call.call_count == 2

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self):
        router = MagicMock()
        call = router.functions.getAmountsOut.return_value.call
        call.side_effect = Exception("execution reverted")
        quoter = V2RouterQuoter(mock_web3(router), ROUTER, backoff_sec=0)

        with pytest.raises(QuoteFailed):
            await quoter.quote(1000, Leg(Protocol.V2, (WBNB, USDT)))
        assert call.call_count == 1

    @pytest.mark.asyncio
    async def test_rejects_other_protocols(self):
        quoter = V2RouterQuoter(mock_web3(MagicMock()), ROUTER)
        with pytest.raises(ValueError):
            await quoter.quote(1, Leg(Protocol.STABLE, (USDT, USDC)))


class TestV3Quoter:
    LEG = Leg(Protocol.V3, (WBNB, USDT), fee=500)

    @pytest.mark.asyncio
    async def test_single_form_success(self):
        single, path = MagicMock(), MagicMock()
        single.functions.quoteExactInputSingle.return_value.call.return_value = (
            480,
            0,
            1,
            80000,
        )
        quoter = V3Quoter(mock_web3(single, path), QUOTER)

        assert await quoter.quote(1000, self.LEG) == 480
        single.functions.quoteExactInputSingle.assert_called_once_with(
            WBNB.address, USDT.address, 500, 1000, 0
        )
        path.functions.quoteExactInput.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_back_to_encoded_path(self):
        single, path = MagicMock(), MagicMock()
        single.functions.quoteExactInputSingle.return_value.call.side_effect = (
            Exception("execution reverted")
        )
        path.functions.quoteExactInput.return_value.call.return_value = 500
        quoter = V3Quoter(mock_web3(single, path), QUOTER)

        assert await quoter.quote(1000, self.LEG) == 500
        path.functions.quoteExactInput.assert_called_once_with(
            encode_v3_path([WBNB.address, USDT.address], [500]), 1000
        )

    @pytest.mark.asyncio
    async def test_both_forms_fail(self):
        single, path = MagicMock(), MagicMock()
        single.functions.quoteExactInputSingle.return_value.call.side_effect = (
            Exception("no such function")
        )
        path.functions.quoteExactInput.return_value.call.side_effect = Exception(
            "execution reverted: SPL"
        )
        quoter = V3Quoter(mock_web3(single, path), QUOTER)

        with pytest.raises(QuoteFailed) as exc_info:
            await quoter.quote(1000, self.LEG)

        message = exc_info.value.message
        assert message.startswith("V3 quote failed:")
        assert "execution reverted: SPL" in message
        assert "fallback after: no such function" in message

    @pytest.mark.asyncio
    async def test_malformed_single_result_triggers_fallback(self):
        single, path = MagicMock(), MagicMock()
        single.functions.quoteExactInputSingle.return_value.call.return_value = "??"
        path.functions.quoteExactInput.return_value.call.return_value = (321, 0, 0, 0)
        quoter = V3Quoter(mock_web3(single, path), QUOTER)

        assert await quoter.quote(1000, self.LEG) == 321


class TestStableSwapQuoter:
    LEG = Leg(Protocol.STABLE, (USDT, USDC))

    @pytest.mark.asyncio
    async def test_returns_potential_outcome(self):
        pool = MagicMock()
        pool.functions.quotePotentialSwap.return_value.call.return_value = (998, 2)
        quoter = StableSwapQuoter(mock_web3(pool), POOL)

        assert await quoter.quote(1000, self.LEG) == 998
        pool.functions.quotePotentialSwap.assert_called_once_with(
            USDT.address, USDC.address, 1000
        )

    @pytest.mark.asyncio
    async def test_revert_uses_label(self):
        pool = MagicMock()
        pool.functions.quotePotentialSwap.return_value.call.side_effect = Exception(
            "CASH"
        )
        quoter = StableSwapQuoter(mock_web3(pool), POOL, label="Wombat")

        with pytest.raises(QuoteFailed, match="Wombat quote failed: CASH"):
            await quoter.quote(1000, self.LEG)

    @pytest.mark.asyncio
    async def test_amount_above_int256_rejected_without_call(self):
        pool = MagicMock()
        quoter = StableSwapQuoter(mock_web3(pool), POOL)

        with pytest.raises(QuoteFailed):
            await quoter.quote(MAX_INT256 + 1, self.LEG)
        pool.functions.quotePotentialSwap.assert_not_called()
