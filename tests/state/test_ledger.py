# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm.kernels.python.fixed_math import U64_MAX
from cpamm.state.ledger import InMemoryLedger, LedgerError

ISSUER = "issuer"
ALICE = "alice"
BOB = "bob"


def _ledger() -> InMemoryLedger:
    ledger = InMemoryLedger()
    ledger.create_mint("usd", ISSUER)
    ledger.create_mint("eur", ISSUER)
    ledger.create_account("alice-usd", "usd", ALICE)
    ledger.create_account("bob-usd", "usd", BOB)
    ledger.create_account("bob-eur", "eur", BOB)
    ledger.mint_to("usd", "alice-usd", 100, ISSUER)
    return ledger


class TestSetup:
    def test_duplicate_account(self) -> None:
        with pytest.raises(LedgerError, match="already exists"):
            _ledger().create_account("alice-usd", "usd", ALICE)

    def test_unknown_mint(self) -> None:
        with pytest.raises(LedgerError, match="unknown mint"):
            _ledger().create_account("x", "gbp", ALICE)

    def test_reads(self) -> None:
        ledger = _ledger()
        assert ledger.balance_of("alice-usd") == 100
        assert ledger.supply_of("usd") == 100
        assert ledger.mint_of("bob-eur") == "eur"
        assert ledger.owner_of("bob-eur") == BOB
        assert ledger.has_account("bob-eur")
        assert not ledger.has_account("nope")
        with pytest.raises(LedgerError, match="unknown account"):
            ledger.balance_of("nope")


class TestTransfer:
    def test_moves_balance(self) -> None:
        ledger = _ledger()
        ledger.transfer("alice-usd", "bob-usd", 40, ALICE)
        assert ledger.balance_of("alice-usd") == 60
        assert ledger.balance_of("bob-usd") == 40
        assert ledger.verify_supply()

    def test_requires_owner(self) -> None:
        with pytest.raises(LedgerError, match="does not own"):
            _ledger().transfer("alice-usd", "bob-usd", 1, BOB)

    def test_requires_same_mint(self) -> None:
        with pytest.raises(LedgerError, match="mint mismatch"):
            _ledger().transfer("alice-usd", "bob-eur", 1, ALICE)

    def test_insufficient(self) -> None:
        with pytest.raises(LedgerError, match="Insufficient"):
            _ledger().transfer("alice-usd", "bob-usd", 101, ALICE)

    def test_zero_is_a_no_op(self) -> None:
        ledger = _ledger()
        ledger.transfer("alice-usd", "bob-usd", 0, ALICE)
        assert ledger.balance_of("bob-usd") == 0

    def test_amount_must_be_u64(self) -> None:
        with pytest.raises(LedgerError, match="u64"):
            _ledger().transfer("alice-usd", "bob-usd", U64_MAX + 1, ALICE)


class TestMintBurn:
    def test_mint_requires_authority(self) -> None:
        with pytest.raises(LedgerError, match="cannot mint"):
            _ledger().mint_to("usd", "bob-usd", 1, ALICE)

    def test_supply_overflow(self) -> None:
        ledger = _ledger()
        with pytest.raises(LedgerError, match="supply overflow"):
            ledger.mint_to("usd", "bob-usd", U64_MAX, ISSUER)

    def test_burn_reduces_supply(self) -> None:
        ledger = _ledger()
        ledger.burn("alice-usd", 30, ALICE)
        assert ledger.balance_of("alice-usd") == 70
        assert ledger.supply_of("usd") == 70
        assert ledger.verify_supply()

    def test_burn_requires_owner(self) -> None:
        with pytest.raises(LedgerError, match="does not own"):
            _ledger().burn("alice-usd", 1, BOB)


class TestTransaction:
    def test_commits(self) -> None:
        ledger = _ledger()
        with ledger.transaction():
            ledger.transfer("alice-usd", "bob-usd", 10, ALICE)
        assert ledger.balance_of("bob-usd") == 10

    def test_rolls_back_everything_on_error(self) -> None:
        ledger = _ledger()
        with pytest.raises(LedgerError):
            with ledger.transaction():
                ledger.transfer("alice-usd", "bob-usd", 10, ALICE)
                ledger.mint_to("usd", "bob-usd", 5, ISSUER)
                ledger.create_mint("gbp", ISSUER)
                ledger.transfer("alice-usd", "bob-usd", 1000, ALICE)
        assert ledger.balance_of("alice-usd") == 100
        assert ledger.balance_of("bob-usd") == 0
        assert ledger.supply_of("usd") == 100
        with pytest.raises(LedgerError, match="unknown mint"):
            ledger.supply_of("gbp")

    def test_rolls_back_on_foreign_exceptions(self) -> None:
        ledger = _ledger()
        with pytest.raises(RuntimeError):
            with ledger.transaction():
                ledger.transfer("alice-usd", "bob-usd", 10, ALICE)
                raise RuntimeError("store failed")
        assert ledger.balance_of("alice-usd") == 100

    def test_nested_inner_failure_keeps_outer_work(self) -> None:
        ledger = _ledger()
        with ledger.transaction():
            ledger.transfer("alice-usd", "bob-usd", 10, ALICE)
            with pytest.raises(LedgerError):
                with ledger.transaction():
                    ledger.transfer("alice-usd", "bob-usd", 20, ALICE)
                    ledger.burn("bob-usd", 1000, BOB)
        assert ledger.balance_of("bob-usd") == 10
        assert ledger.balance_of("alice-usd") == 90
