"""
Governance Invariant Test Suite

Drives the token through seeded random operation sequences and checks after
every step:
  - locked ≤ balance, unlocked == balance − locked
  - Σ locked == locked supply, Σ balances == total supply
  - votum ≤ locked, ballot total == Σ vota
  - at most one schedule slot is occupied
  - locked balances never decrease within an epoch
  - vota never decrease except to exactly 0 on revocation
  - a failed operation leaves no trace
"""

import copy
import random
import sys
import os

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from xan.clock import ManualClock
from xan.exceptions import XanException
from xan.governance import GovernanceError, GovernanceParameters, VoteRevoked
from xan.tokens import XanToken


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

ACCOUNTS = ["0x" + f"{i:02x}" * 20 for i in range(0xa1, 0xa6)]
COUNCIL = "0x" + "cc" * 20
IMPLS = ["0x" + f"{i:02x}" * 20 for i in range(0x10, 0x14)]
IMPL_V1 = "0x" + "01" * 20

SUPPLY = 10_000
DELAY = 100


def make_token():
    clock = ManualClock(0)
    token = XanToken.deploy(
        initial_holder=ACCOUNTS[0],
        council=COUNCIL,
        implementation=IMPL_V1,
        initial_supply=SUPPLY,
        parameters=GovernanceParameters(delay_duration=DELAY),
        clock=clock,
    )
    share = SUPPLY // len(ACCOUNTS)
    for account in ACCOUNTS[1:]:
        token.transfer(ACCOUNTS[0], account, share)
    return token, clock


def snapshot(token):
    """Everything an operation could touch."""
    epoch = token.epoch()
    return (
        token.implementation,
        token.current_epoch,
        token.total_supply,
        {a: token.balance_of(a) for a in ACCOUNTS},
        {(o, s): token.allowance(o, s) for o in ACCOUNTS for s in ACCOUNTS},
        copy.deepcopy(epoch.locked),
        epoch.locked_supply,
        {impl: (b.total_votes, dict(b.vota)) for impl, b in epoch.ballots.items()},
        epoch.most_voted,
        token.scheduled_voter_body_upgrade(),
        token.scheduled_council_upgrade(),
        token.governance_council,
        len(token.events),
    )


def check_invariants(token):
    epoch = token.epoch()
    total = 0
    for account in ACCOUNTS:
        balance = token.balance_of(account)
        locked = token.locked_balance_of(account)
        total += balance
        assert 0 <= locked <= balance
        assert token.unlocked_balance_of(account) == balance - locked
    assert total == token.total_supply

    assert sum(epoch.locked.values()) == token.locked_supply

    for impl, ballot in epoch.ballots.items():
        assert ballot.total_votes == sum(ballot.vota.values())
        for voter, votum in ballot.vota.items():
            assert votum <= token.locked_balance_of(voter)

    vb, _ = token.scheduled_voter_body_upgrade()
    cu, _ = token.scheduled_council_upgrade()
    assert vb is None or cu is None


def random_step(token, clock, rng):
    """Perform one random operation; returns its name."""
    a = rng.choice(ACCOUNTS)
    b = rng.choice(ACCOUNTS)
    impl = rng.choice(IMPLS)
    amount = rng.randint(1, SUPPLY // 4)
    op = rng.choice([
        "transfer", "transfer", "approve", "transfer_from", "burn",
        "lock", "lock", "transfer_and_lock",
        "cast_vote", "cast_vote", "cast_vote", "revoke_vote",
        "schedule_voter_body", "cancel_voter_body",
        "schedule_council", "cancel_council", "veto",
        "upgrade", "tick",
    ])

    if op == "transfer":
        token.transfer(a, b, amount)
    elif op == "approve":
        token.approve(a, b, amount)
    elif op == "transfer_from":
        token.transfer_from(a, b, rng.choice(ACCOUNTS), amount)
    elif op == "burn":
        token.burn(a, rng.randint(1, 50))
    elif op == "lock":
        token.lock(a, amount)
    elif op == "transfer_and_lock":
        token.transfer_and_lock(a, b, amount)
    elif op == "cast_vote":
        token.cast_vote(a, impl)
    elif op == "revoke_vote":
        token.revoke_vote(a, impl)
    elif op == "schedule_voter_body":
        token.schedule_voter_body_upgrade(a)
    elif op == "cancel_voter_body":
        token.cancel_voter_body_upgrade(a)
    elif op == "schedule_council":
        caller = COUNCIL if rng.random() < 0.8 else a
        token.schedule_council_upgrade(caller, impl)
    elif op == "cancel_council":
        caller = COUNCIL if rng.random() < 0.8 else a
        token.cancel_council_upgrade(caller)
    elif op == "veto":
        token.veto_council_upgrade(a)
    elif op == "upgrade":
        candidate = (
            token.scheduled_voter_body_upgrade()[0]
            or token.scheduled_council_upgrade()[0]
            or impl
        )
        token.upgrade_to(a, candidate)
    elif op == "tick":
        clock.advance(rng.choice([0, 1, DELAY // 2, DELAY]))
    return op


# ══════════════════════════════════════════════════════════════════════
#  RANDOM SEQUENCES
# ══════════════════════════════════════════════════════════════════════

class TestRandomSequences:

    @pytest.mark.parametrize("seed", range(12))
    def test_invariants_hold(self, seed):
        rng = random.Random(seed)
        token, clock = make_token()
        check_invariants(token)

        for _ in range(400):
            before = snapshot(token)
            prev_epoch = token.current_epoch
            prev_locked = dict(token.epoch().locked)
            prev_vota = {
                impl: dict(b.vota) for impl, b in token.epoch().ballots.items()
            }
            n_events = len(token.events)

            try:
                random_step(token, clock, rng)
            except XanException:
                assert snapshot(token) == before
                continue

            check_invariants(token)

            if token.current_epoch != prev_epoch:
                assert token.locked_supply == 0
                assert token.most_voted_implementation is None
                continue

            for account, locked in prev_locked.items():
                assert token.locked_balance_of(account) >= locked

            revoked = {
                (e.voter, e.implementation)
                for e in token.events[n_events:]
                if isinstance(e, VoteRevoked)
            }
            for impl, vota in prev_vota.items():
                for voter, votum in vota.items():
                    now = token.get_votes(voter, impl)
                    if (voter, impl) in revoked:
                        assert now == 0
                    else:
                        assert now >= votum

    @pytest.mark.parametrize("seed", range(4))
    def test_sequences_reach_upgrades(self, seed):
        """Biased towards governance so epochs actually turn over."""
        rng = random.Random(1000 + seed)
        token, clock = make_token()
        for account in ACCOUNTS:
            token.lock(account, token.balance_of(account) // 2)

        upgrades = 0
        for _ in range(60):
            voter = rng.choice(ACCOUNTS)
            impl = rng.choice(IMPLS[:2])
            try:
                if token.locked_balance_of(voter) == 0:
                    token.lock(voter, token.unlocked_balance_of(voter))
                token.cast_vote(voter, impl)
                token.schedule_voter_body_upgrade(voter)
                clock.advance(DELAY)
                token.upgrade_to(voter, token.scheduled_voter_body_upgrade()[0])
                upgrades += 1
            except GovernanceError:
                clock.advance(1)
            check_invariants(token)

        assert upgrades > 0
        assert token.current_epoch == upgrades
