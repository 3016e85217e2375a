"""
Reentrancy and atomicity test suite

A hostile asset ledger calls back into the pool from inside its own transfer
hooks. Every nested mutating call must fail with ReentrantCall while the
pool state still matches the state just before the outer call's first
external transfer. A ledger that refuses a transfer must abort the whole
operation with no partial effects, undoing only the transfers that
operation made: movements by another pool sharing an asset survive.
"""

from typing import Callable, List, Optional

import pytest

from simpledex.exceptions import InvariantViolation, ReentrantCall, TransferFailed
from simpledex.exchange import GuardState, Settlement, SimpleDEX
from simpledex.tokens import Token

E18 = 10**18
DEPLOYER = "0x" + "de" * 20
COLLECTOR = "0x" + "fe" * 20
PROVIDER = "0x" + "a1" * 20
TRADER = "0x" + "b0" * 20
ATTACKER = "0x" + "ee" * 20


class HostileToken(Token):
    """Token that runs a callback before moving funds, once, and can refuse transfers."""

    def __init__(self, *args, reraise: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.attack: Optional[Callable[[], None]] = None
        self.reraise = reraise
        self.refuse = False
        self.caught: List[Exception] = []
        self.observed: List[tuple] = []

    def _fire(self):
        attack, self.attack = self.attack, None
        if attack is None:
            return
        try:
            attack()
        except ReentrantCall as e:
            self.caught.append(e)
            if self.reraise:
                raise

    def transfer_from(self, spender, owner, recipient, amount):
        self._fire()
        if self.refuse:
            return False
        return super().transfer_from(spender, owner, recipient, amount)

    def transfer(self, sender, recipient, amount):
        self._fire()
        if self.refuse:
            return False
        return super().transfer(sender, recipient, amount)


class RefusingToken(Token):
    """Token whose outgoing transfers from the pool report failure."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.refuse = False

    def transfer(self, sender, recipient, amount):
        if self.refuse:
            return False
        return super().transfer(sender, recipient, amount)


def make_pool(hostile_cls=HostileToken, **hostile_kwargs):
    evil = hostile_cls("Evil", "EVL", 1_000_000 * E18, DEPLOYER, **hostile_kwargs)
    good = Token("MyTokenB", "TKB", 1_000_000 * E18, DEPLOYER)
    dex = SimpleDEX(evil, good, COLLECTOR)
    for account in (PROVIDER, ATTACKER):
        evil.transfer(DEPLOYER, account, 10_000 * E18)
        good.transfer(DEPLOYER, account, 10_000 * E18)
        evil.approve(account, dex.address, 10_000 * E18)
        good.approve(account, dex.address, 10_000 * E18)
    return evil, good, dex


def seed(dex, amount=1000 * E18):
    dex.add_liquidity(PROVIDER, amount, amount)


def full_state(evil, good, dex):
    accounts = (PROVIDER, ATTACKER, COLLECTOR, dex.address)
    return (
        dex.current_reserves(),
        dex.total_supply,
        tuple(dex.balance_of(a) for a in accounts),
        tuple(evil.balance_of(a) for a in accounts),
        tuple(good.balance_of(a) for a in accounts),
        len(dex.events),
    )


def observe(evil, dex, nested):
    """Build an attack that records pool state, then re-enters via *nested*."""
    def attack():
        evil.observed.append((dex.current_reserves(), dex.total_supply))
        nested()
    return attack


class TestReentrantCallsRejected:

    def test_reenter_add_liquidity_during_add_liquidity(self):
        evil, good, dex = make_pool()
        seed(dex)
        reserves, supply = dex.current_reserves(), dex.total_supply
        evil.attack = observe(evil, dex, lambda: dex.add_liquidity(ATTACKER, 10 * E18, 10 * E18))

        dex.add_liquidity(PROVIDER, 100 * E18, 100 * E18)

        assert len(evil.caught) == 1
        assert isinstance(evil.caught[0], ReentrantCall)
        assert evil.observed == [(reserves, supply)]
        assert dex.balance_of(ATTACKER) == 0

    def test_reenter_swap_during_swap(self):
        evil, good, dex = make_pool()
        seed(dex)
        reserves, supply = dex.current_reserves(), dex.total_supply
        evil.attack = observe(
            evil, dex, lambda: dex.swap(ATTACKER, dex.token_a, dex.token_b, 50 * E18)
        )

        dex.swap(ATTACKER, dex.token_a, dex.token_b, 100 * E18)

        assert [type(e) for e in evil.caught] == [ReentrantCall]
        assert evil.observed == [(reserves, supply)]
        assert len([e for e in dex.events if type(e).__name__ == "Swapped"]) == 1

    def test_reenter_remove_liquidity_during_swap(self):
        evil, good, dex = make_pool()
        seed(dex)
        evil.attack = lambda: dex.remove_liquidity(PROVIDER, 1)
        dex.swap(ATTACKER, dex.token_a, dex.token_b, 100 * E18)
        assert [type(e) for e in evil.caught] == [ReentrantCall]
        assert dex.balance_of(PROVIDER) == 1000 * E18

    def test_reenter_swap_during_remove_liquidity(self):
        evil, good, dex = make_pool()
        seed(dex)
        evil.attack = lambda: dex.swap(ATTACKER, dex.token_b, dex.token_a, 100 * E18)
        event = dex.remove_liquidity(PROVIDER, 500 * E18)
        assert [type(e) for e in evil.caught] == [ReentrantCall]
        assert (event.amount_a, event.amount_b) == (500 * E18, 500 * E18)

    def test_share_transfer_blocked_while_in_flight(self):
        evil, good, dex = make_pool()
        seed(dex)
        evil.attack = lambda: dex.transfer(PROVIDER, ATTACKER, 1)
        dex.swap(ATTACKER, dex.token_a, dex.token_b, 10 * E18)
        assert [type(e) for e in evil.caught] == [ReentrantCall]
        assert dex.balance_of(ATTACKER) == 0

    def test_guard_free_afterwards(self):
        evil, good, dex = make_pool()
        seed(dex)
        evil.attack = lambda: dex.add_liquidity(ATTACKER, 1, 1)
        dex.swap(ATTACKER, dex.token_a, dex.token_b, 10 * E18)
        assert dex._guard.state is GuardState.FREE
        dex.swap(ATTACKER, dex.token_a, dex.token_b, 10 * E18)


class TestReentrancyAbortsOuterCall:

    def test_outer_swap_reverts_completely(self):
        evil, good, dex = make_pool(reraise=True)
        seed(dex)
        before = full_state(evil, good, dex)
        evil.attack = lambda: dex.swap(ATTACKER, dex.token_a, dex.token_b, 1 * E18)

        with pytest.raises(ReentrantCall):
            dex.swap(ATTACKER, dex.token_a, dex.token_b, 100 * E18)

        assert full_state(evil, good, dex) == before
        assert dex._guard.state is GuardState.FREE

    def test_outer_add_liquidity_reverts_completely(self):
        evil, good, dex = make_pool(reraise=True)
        seed(dex)
        before = full_state(evil, good, dex)
        evil.attack = lambda: dex.remove_liquidity(PROVIDER, 10)

        with pytest.raises(ReentrantCall):
            dex.add_liquidity(ATTACKER, 100 * E18, 100 * E18)

        assert full_state(evil, good, dex) == before

    def test_outer_remove_liquidity_reverts_completely(self):
        evil, good, dex = make_pool(reraise=True)
        seed(dex)
        before = full_state(evil, good, dex)
        evil.attack = lambda: dex.add_liquidity(ATTACKER, 1 * E18, 1 * E18)

        with pytest.raises(ReentrantCall):
            dex.remove_liquidity(PROVIDER, 400 * E18)

        assert full_state(evil, good, dex) == before
        assert dex.balance_of(PROVIDER) == 1000 * E18


class TestRefusedTransfers:

    def test_refused_push_aborts_withdrawal(self):
        evil, good, dex = make_pool(hostile_cls=RefusingToken)
        seed(dex)
        before = full_state(evil, good, dex)
        evil.refuse = True

        with pytest.raises(TransferFailed):
            dex.remove_liquidity(PROVIDER, 400 * E18)

        assert full_state(evil, good, dex) == before
        assert dex._guard.state is GuardState.FREE

    def test_refused_output_aborts_swap_and_refunds_input(self):
        evil, good, dex = make_pool(hostile_cls=RefusingToken)
        seed(dex)
        before = full_state(evil, good, dex)
        evil.refuse = True

        with pytest.raises(TransferFailed):
            dex.swap(ATTACKER, dex.token_b, dex.token_a, 100 * E18)

        assert full_state(evil, good, dex) == before
        assert good.allowance(ATTACKER, dex.address) == 10_000 * E18

    def test_pool_usable_after_refusal(self):
        evil, good, dex = make_pool(hostile_cls=RefusingToken)
        seed(dex)
        evil.refuse = True
        with pytest.raises(TransferFailed):
            dex.swap(ATTACKER, dex.token_b, dex.token_a, 100 * E18)
        evil.refuse = False
        event = dex.swap(ATTACKER, dex.token_b, dex.token_a, 100 * E18)
        assert event.amount_out > 0


def make_two_pools():
    """Two pools sharing one asset: (SHR, EVL) and (SHR, OTH)."""
    shared = Token("Shared", "SHR", 1_000_000 * E18, DEPLOYER)
    evil = HostileToken("Evil", "EVL", 1_000_000 * E18, DEPLOYER)
    other = Token("Other", "OTH", 1_000_000 * E18, DEPLOYER)
    first = SimpleDEX(shared, evil, COLLECTOR)
    second = SimpleDEX(shared, other, COLLECTOR)
    for token in (shared, evil, other):
        for account in (PROVIDER, TRADER):
            token.transfer(DEPLOYER, account, 10_000 * E18)
            for pool in (first, second):
                token.approve(account, pool.address, 10_000 * E18)
    first.add_liquidity(PROVIDER, 1000 * E18, 1000 * E18)
    second.add_liquidity(PROVIDER, 1000 * E18, 1000 * E18)
    return shared, evil, other, first, second


class TestSharedAssetAcrossPools:

    def test_failed_swap_keeps_other_pools_completed_swap(self):
        shared, evil, other, first, second = make_two_pools()
        completed = []
        evil.attack = lambda: completed.append(
            second.swap(TRADER, shared.address, other.address, 100 * E18)
        )
        evil.refuse = True

        with pytest.raises(TransferFailed):
            first.swap(TRADER, shared.address, evil.address, 100 * E18)

        assert len(completed) == 1
        out = completed[0].amount_out
        # every pool still holds exactly its reserves
        assert second.reserve_a == 1000 * E18 + 100 * E18 - 5 * 10**17
        assert shared.balance_of(second.address) == second.reserve_a
        assert other.balance_of(second.address) == second.reserve_b
        assert first.current_reserves() == (1000 * E18, 1000 * E18)
        assert shared.balance_of(first.address) == first.reserve_a
        assert evil.balance_of(first.address) == first.reserve_b
        # the trader paid for the second swap and nothing else
        assert shared.balance_of(TRADER) == 10_000 * E18 - 100 * E18
        assert other.balance_of(TRADER) == 10_000 * E18 + out
        assert evil.balance_of(TRADER) == 10_000 * E18
        assert shared.balance_of(COLLECTOR) == 5 * 10**17
        assert shared.allowance(TRADER, first.address) == 10_000 * E18
        assert second.events[-1] is completed[0]

    def test_failed_deposit_keeps_other_pools_deposit(self):
        shared, evil, other, first, second = make_two_pools()
        evil.attack = lambda: second.add_liquidity(TRADER, 50 * E18, 50 * E18)
        evil.refuse = True

        with pytest.raises(TransferFailed):
            first.add_liquidity(TRADER, 10 * E18, 10 * E18)

        assert second.balance_of(TRADER) == 50 * E18
        assert shared.balance_of(second.address) == second.reserve_a == 1050 * E18
        assert shared.balance_of(first.address) == first.reserve_a == 1000 * E18
        assert shared.balance_of(TRADER) == 10_000 * E18 - 50 * E18
        assert first.balance_of(TRADER) == 0


class TestCompensatingTransfers:

    def test_unwind_reverses_pulls_and_pushes(self):
        token = Token("MyTokenA", "TKA", 1_000_000 * E18, DEPLOYER)
        pool = "0x" + "99" * 20
        token.transfer(DEPLOYER, TRADER, 100)
        token.transfer(DEPLOYER, pool, 100)
        token.approve(TRADER, pool, 60)

        settlement = Settlement(pool)
        settlement.pull(token, TRADER, pool, 40)
        settlement.pull(token, TRADER, COLLECTOR, 10)
        settlement.push(token, PROVIDER, 25)
        assert len(settlement.journal) == 3

        settlement.unwind()

        assert settlement.journal == []
        assert token.balance_of(TRADER) == 100
        assert token.balance_of(pool) == 100
        assert token.balance_of(COLLECTOR) == 0
        assert token.balance_of(PROVIDER) == 0
        assert token.allowance(TRADER, pool) == 60

    def test_unwind_leaves_unrelated_movements(self):
        token = Token("MyTokenA", "TKA", 1_000_000 * E18, DEPLOYER)
        pool = "0x" + "99" * 20
        token.transfer(DEPLOYER, TRADER, 100)
        token.approve(TRADER, pool, 100)

        settlement = Settlement(pool)
        settlement.pull(token, TRADER, pool, 30)
        token.transfer(DEPLOYER, PROVIDER, 7)
        settlement.unwind()

        assert token.balance_of(PROVIDER) == 7
        assert token.balance_of(TRADER) == 100

    def test_irreversible_transfer_reports_invariant_violation(self):
        evil, good, dex = make_pool()
        seed(dex)
        fee = 100 * E18 * 5 // 1000
        # the collector spends its fee before the output transfer is refused
        evil.attack = lambda: good.transfer(COLLECTOR, ATTACKER, fee)
        evil.refuse = True
        attacker_b = good.balance_of(ATTACKER)

        with pytest.raises(InvariantViolation, match="Rollback incomplete") as excinfo:
            dex.swap(ATTACKER, dex.token_b, dex.token_a, 100 * E18)

        assert isinstance(excinfo.value.__context__, TransferFailed)
        # the net input still came back out of the pool
        assert good.balance_of(dex.address) == dex.reserve_b == 1000 * E18
        assert good.balance_of(ATTACKER) == attacker_b
        assert dex._guard.state is GuardState.FREE
