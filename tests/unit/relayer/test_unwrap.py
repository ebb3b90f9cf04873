"""Tests for unwrap dispatch, protocol resolution and chained unwrap plans."""

from relayer_sdk.config import RelayerConfig
from relayer_sdk.models import OutputReference, PoolType, UnwrapType
from relayer_sdk.relayer import (
    decode_relayer_call,
    encode_unwrap,
    encode_unwrap_calls,
    resolve_unwrap_type,
    to_chained_reference,
)
from tests.helpers import make_linear_pool
from tests.helpers.constants import (
    AAVE_LINEAR_FACTORY,
    BB_A_DAI,
    BB_A_DAI_ID,
    DAI,
    RELAYER,
    USDC,
    USER,
    WA_DAI,
    WA_USDC,
)


class TestEncodeUnwrap:
    """Each UnwrapType maps to exactly one relayer function."""

    def test_dispatch(self) -> None:
        expected = {
            UnwrapType.AAVE: "unwrapAaveStaticToken",
            UnwrapType.YEARN: "unwrapYearnVaultToken",
            UnwrapType.ERC4626: "unwrapERC4626",
        }
        for unwrap_type, function in expected.items():
            calldata = encode_unwrap(unwrap_type, WA_DAI, RELAYER, USER, 10, 0)
            assert decode_relayer_call(calldata).function == function

    def test_aave_unwraps_to_underlying(self) -> None:
        args = decode_relayer_call(encode_unwrap(UnwrapType.AAVE, WA_DAI, RELAYER, USER, 10, 0)).args
        assert args["toUnderlying"] is True


class TestResolveUnwrapType:
    def test_from_pool_type(self) -> None:
        config = RelayerConfig()
        for pool_type, unwrap_type in (
            (PoolType.AAVE_LINEAR, UnwrapType.AAVE),
            (PoolType.YEARN_LINEAR, UnwrapType.YEARN),
            (PoolType.ERC4626_LINEAR, UnwrapType.ERC4626),
        ):
            pool = make_linear_pool(BB_A_DAI_ID, BB_A_DAI, DAI, WA_DAI, pool_type)
            assert resolve_unwrap_type(pool, config) == unwrap_type

    def test_generic_linear_uses_default(self) -> None:
        pool = make_linear_pool(BB_A_DAI_ID, BB_A_DAI, DAI, WA_DAI, PoolType.LINEAR)
        assert resolve_unwrap_type(pool, RelayerConfig()) == UnwrapType.AAVE
        config = RelayerConfig(default_unwrap_type=UnwrapType.YEARN)
        assert resolve_unwrap_type(pool, config) == UnwrapType.YEARN

    def test_factory_takes_precedence(self) -> None:
        pool = make_linear_pool(
            BB_A_DAI_ID, BB_A_DAI, DAI, WA_DAI, PoolType.AAVE_LINEAR, factory=AAVE_LINEAR_FACTORY
        )
        config = RelayerConfig(linear_pool_factories={AAVE_LINEAR_FACTORY: UnwrapType.ERC4626})
        assert resolve_unwrap_type(pool, config) == UnwrapType.ERC4626

    def test_unknown_factory_falls_through(self) -> None:
        pool = make_linear_pool(
            BB_A_DAI_ID, BB_A_DAI, DAI, WA_DAI, PoolType.YEARN_LINEAR, factory=AAVE_LINEAR_FACTORY
        )
        assert resolve_unwrap_type(pool, RelayerConfig()) == UnwrapType.YEARN


class TestEncodeUnwrapCalls:
    def test_chains_swap_outputs(self) -> None:
        plan = encode_unwrap_calls(
            [WA_DAI, WA_USDC],
            [UnwrapType.AAVE, UnwrapType.ERC4626],
            [DAI, WA_USDC, USDC, WA_DAI],
            sender=RELAYER,
            recipient=USER,
            first_key=2,
        )

        assert plan.swap_output_references == [
            OutputReference(index=3, key=to_chained_reference(2)),
            OutputReference(index=1, key=to_chained_reference(4)),
        ]

        first, second = (decode_relayer_call(c) for c in plan.calls)
        assert first.function == "unwrapAaveStaticToken"
        assert first.args["amount"] == to_chained_reference(2)
        assert first.args["sender"] == RELAYER
        assert first.args["recipient"] == USER
        assert first.args["outputReference"] == to_chained_reference(3)
        assert second.function == "unwrapERC4626"
        assert second.args["amount"] == to_chained_reference(4)
        assert second.args["outputReference"] == to_chained_reference(5)

    def test_skips_tokens_not_in_assets(self) -> None:
        plan = encode_unwrap_calls(
            [WA_DAI, WA_USDC],
            [UnwrapType.AAVE, UnwrapType.AAVE],
            [DAI, WA_USDC],
            sender=RELAYER,
            recipient=USER,
        )

        assert len(plan.calls) == 1
        assert plan.swap_output_references == [
            OutputReference(index=1, key=to_chained_reference(0))
        ]
        assert decode_relayer_call(plan.calls[0]).args["outputReference"] == to_chained_reference(1)

    def test_nothing_to_unwrap(self) -> None:
        plan = encode_unwrap_calls([WA_DAI], [UnwrapType.AAVE], [DAI], RELAYER, USER, first_key=4)
        assert plan.calls == []
        assert plan.swap_output_references == []
