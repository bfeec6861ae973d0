"""
Module 04 - Commitment Ledger Unit Tests
Tests for core/ledger/ledger.py

Tests:
- Token registry and master-data compare-and-swap
- Mint / transfer / burn state transitions
- Holder and supply reorgs with oracle quorum
- Atomicity: rejected calls change neither state nor audit log
- Replay safety and basket uniqueness
"""
import threading

import pytest

from core.crypto.commitment import master_data_fingerprint
from core.ledger import BasketState, CommitmentLedger
from core.schemas.errors import (
    DuplicateBasketException,
    DuplicateTokenException,
    InvalidBasketException,
    QuorumNotMetException,
    SchemaValidationException,
    StaleRevisionException,
    UnauthorizedException,
    UnknownTokenException,
)

from fixtures.common import (
    OPERATOR,
    make_ledger,
    make_keypairs,
    make_ledger_with_token,
    make_master_data,
    make_record,
    sign_reorg,
)


ALICE = "alice"
BOB = "bob"


def _snapshot(ledger: CommitmentLedger, hashes):
    return [ledger.basket_state(h) for h in hashes], len(ledger.audit_log)


def _minted(total_supply: int = 100):
    """Ledger where ALICE holds the whole supply basket of token 1."""
    ledger, keypairs, supply = make_ledger_with_token(total_supply=total_supply)
    ledger.mint(OPERATOR, [supply.basket], ALICE)
    return ledger, keypairs, supply


# =============================================================================
# Token registry
# =============================================================================

class TestCreateToken:

    def test_registers_token(self):
        ledger, _ = make_ledger()
        supply = make_record(value=1000)
        fp = master_data_fingerprint(make_master_data())

        event = ledger.create_token(OPERATOR, 1, supply.basket, fp, ref={"req": 1})

        assert ledger.token_master_data_revision(1) == 1
        assert ledger.token_master_data_fp(1) == fp
        assert ledger.total_supply(1) == supply.basket
        assert ledger.basket_state(supply.basket).state is BasketState.LIVE_SUPPLY
        assert event.event == "CreateToken"
        assert event.ref == {"req": 1}
        assert event.caller == OPERATOR

    def test_duplicate_token(self, ledger_with_token):
        ledger, _, _ = ledger_with_token

        with pytest.raises(DuplicateTokenException):
            ledger.create_token(OPERATOR, 1, make_record().basket, "0x" + "00" * 32)

    def test_duplicate_token_checked_before_basket(self, ledger_with_token):
        ledger, _, supply = ledger_with_token

        with pytest.raises(DuplicateTokenException):
            ledger.create_token(OPERATOR, 1, supply.basket, "0x" + "00" * 32)

    def test_supply_basket_must_be_fresh(self, ledger_with_token):
        ledger, _, supply = ledger_with_token

        with pytest.raises(DuplicateBasketException):
            ledger.create_token(OPERATOR, 2, supply.basket, "0x" + "00" * 32)
        assert not ledger.has_token(2)

    def test_operator_only(self):
        ledger, _ = make_ledger()

        with pytest.raises(UnauthorizedException):
            ledger.create_token(ALICE, 1, make_record().basket, "0x" + "00" * 32)
        assert len(ledger.audit_log) == 0

    def test_unknown_token_reads(self):
        ledger, _ = make_ledger()

        with pytest.raises(UnknownTokenException):
            ledger.total_supply(42)
        with pytest.raises(UnknownTokenException):
            ledger.token_master_data_revision(42)

    def test_malformed_hash_rejected(self):
        ledger, _ = make_ledger()

        with pytest.raises(SchemaValidationException):
            ledger.create_token(OPERATOR, 1, "0x1234", "0x" + "00" * 32)


class TestUpdateMasterData:

    def test_compare_and_swap(self, ledger_with_token):
        ledger, _, _ = ledger_with_token
        fp1 = ledger.token_master_data_fp(1)
        fp2 = master_data_fingerprint(make_master_data(revision=2))

        event = ledger.update_master_data(OPERATOR, 1, 1, fp1, fp2, ref="upd")

        assert ledger.token_master_data_revision(1) == 2
        assert ledger.token_master_data_fp(1) == fp2
        assert (event.from_revision, event.to_revision) == (1, 2)
        assert (event.from_fp, event.to_fp) == (fp1, fp2)

    def test_stale_revision(self, ledger_with_token):
        ledger, _, _ = ledger_with_token
        fp1 = ledger.token_master_data_fp(1)
        fp2 = master_data_fingerprint(make_master_data(revision=2))

        with pytest.raises(StaleRevisionException) as exc_info:
            ledger.update_master_data(OPERATOR, 1, 2, fp1, fp2)

        assert exc_info.value.retryable
        assert exc_info.value.details["current_revision"] == 1

    def test_stale_fingerprint(self, ledger_with_token):
        ledger, _, _ = ledger_with_token

        with pytest.raises(StaleRevisionException):
            ledger.update_master_data(OPERATOR, 1, 1, "0x" + "ee" * 32, "0x" + "ff" * 32)

    def test_second_update_with_same_base_fails(self, ledger_with_token):
        """Two writers race from revision 1: only the first commits."""
        ledger, _, _ = ledger_with_token
        fp1 = ledger.token_master_data_fp(1)
        fp_a = "0x" + "aa" * 32
        fp_b = "0x" + "bb" * 32

        ledger.update_master_data(OPERATOR, 1, 1, fp1, fp_a)
        with pytest.raises(StaleRevisionException):
            ledger.update_master_data(OPERATOR, 1, 1, fp1, fp_b)

        assert ledger.token_master_data_fp(1) == fp_a

    def test_concurrent_updates_serialize(self, ledger_with_token):
        ledger, _, _ = ledger_with_token
        fp1 = ledger.token_master_data_fp(1)
        outcomes = []
        barrier = threading.Barrier(8)

        def update(i):
            barrier.wait()
            try:
                ledger.update_master_data(OPERATOR, 1, 1, fp1, "0x" + f"{i + 1:064x}")
                outcomes.append("ok")
            except StaleRevisionException:
                outcomes.append("stale")

        threads = [threading.Thread(target=update, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 1
        assert outcomes.count("stale") == 7
        assert ledger.token_master_data_revision(1) == 2

    def test_unknown_token(self):
        ledger, _ = make_ledger()

        with pytest.raises(UnknownTokenException):
            ledger.update_master_data(OPERATOR, 9, 1, "0x" + "00" * 32, "0x" + "11" * 32)


# =============================================================================
# Basket movements
# =============================================================================

class TestMint:

    def test_mint_assigns_owner(self, ledger_with_token):
        ledger, _, supply = ledger_with_token

        event = ledger.mint(OPERATOR, [supply.basket], ALICE, ref=7)

        assert ledger.owner(supply.basket) == ALICE
        assert event.receiver == ALICE
        assert event.baskets == [supply.basket]
        assert event.ref == 7

    def test_mint_twice_fails(self, ledger_with_token):
        ledger, _, supply = ledger_with_token
        ledger.mint(OPERATOR, [supply.basket], ALICE)

        with pytest.raises(InvalidBasketException):
            ledger.mint(OPERATOR, [supply.basket], BOB)
        assert ledger.owner(supply.basket) == ALICE

    def test_mint_unknown_basket_fails(self, ledger_with_token):
        ledger, _, _ = ledger_with_token

        with pytest.raises(InvalidBasketException):
            ledger.mint(OPERATOR, [make_record().basket], ALICE)

    def test_mint_is_atomic(self, ledger_with_token):
        ledger, _, supply = ledger_with_token
        unknown = make_record().basket
        before = _snapshot(ledger, [supply.basket, unknown])

        with pytest.raises(InvalidBasketException):
            ledger.mint(OPERATOR, [supply.basket, unknown], ALICE)

        assert _snapshot(ledger, [supply.basket, unknown]) == before

    def test_mint_duplicate_in_batch(self, ledger_with_token):
        ledger, _, supply = ledger_with_token

        with pytest.raises(DuplicateBasketException):
            ledger.mint(OPERATOR, [supply.basket, supply.basket], ALICE)

    def test_mint_empty_batch(self, ledger_with_token):
        ledger, _, _ = ledger_with_token

        with pytest.raises(InvalidBasketException):
            ledger.mint(OPERATOR, [], ALICE)

    def test_mint_operator_only(self, ledger_with_token):
        ledger, _, supply = ledger_with_token

        with pytest.raises(UnauthorizedException):
            ledger.mint(ALICE, [supply.basket], ALICE)


class TestTransfer:

    def test_transfer_changes_owner_keeps_hash(self):
        ledger, _, supply = _minted()

        event = ledger.transfer(ALICE, [supply.basket], BOB, ref="t1")

        assert ledger.owner(supply.basket) == BOB
        assert event.event == "Transfer"
        assert event.caller == ALICE

    def test_transfer_by_non_owner(self):
        ledger, _, supply = _minted()

        with pytest.raises(UnauthorizedException) as exc_info:
            ledger.transfer(BOB, [supply.basket], BOB)

        assert exc_info.value.details["basket"] == supply.basket
        assert ledger.owner(supply.basket) == ALICE

    def test_transfer_supply_basket_is_invalid(self, ledger_with_token):
        ledger, _, supply = ledger_with_token

        with pytest.raises(InvalidBasketException):
            ledger.transfer(OPERATOR, [supply.basket], BOB)

    def test_transfer_to_self_allowed(self):
        ledger, _, supply = _minted()

        ledger.transfer(ALICE, [supply.basket], ALICE)

        assert ledger.owner(supply.basket) == ALICE

    def test_transfer_spent_basket(self):
        ledger, _, supply = _minted()
        ledger.burn(ALICE, [supply.basket])

        with pytest.raises(InvalidBasketException):
            ledger.transfer(ALICE, [supply.basket], BOB)


class TestBurn:

    def test_burn_spends(self):
        ledger, _, supply = _minted()

        event = ledger.burn(ALICE, [supply.basket], ref="b")

        assert ledger.basket_state(supply.basket).state is BasketState.SPENT
        assert ledger.owner(supply.basket) is None
        assert event.baskets == [supply.basket]

    def test_burn_twice(self):
        ledger, _, supply = _minted()
        ledger.burn(ALICE, [supply.basket])

        with pytest.raises(InvalidBasketException):
            ledger.burn(ALICE, [supply.basket])

    def test_burn_by_non_owner(self):
        ledger, _, supply = _minted()

        with pytest.raises(UnauthorizedException):
            ledger.burn(BOB, [supply.basket])


# =============================================================================
# Reorganization
# =============================================================================

class TestReorgHolderBaskets:

    def test_end_to_end_split(self):
        """B0(100) -> B1(40) + B2(60), then the same submission is replayed."""
        ledger, keypairs, b0 = _minted(100)
        b1 = make_record(value=40)
        b2 = make_record(value=60)
        sigs = sign_reorg(keypairs[:2], [b0.basket], [b1.basket, b2.basket])

        event = ledger.reorg_holder_baskets(ALICE, sigs, [b0.basket], [b1.basket, b2.basket], ref="split")

        assert ledger.basket_state(b0.basket).state is BasketState.SPENT
        assert ledger.owner(b1.basket) == ALICE
        assert ledger.owner(b2.basket) == ALICE
        assert event.signers == sorted(kp.public_key for kp in keypairs[:2])
        assert event.ref == "split"

        with pytest.raises(InvalidBasketException):
            ledger.reorg_holder_baskets(ALICE, sigs, [b0.basket], [b1.basket, b2.basket])

    def test_one_signature_fails_quorum(self):
        ledger, keypairs, b0 = _minted()
        out = make_record(value=100)
        sigs = sign_reorg(keypairs[:1], [b0.basket], [out.basket])

        with pytest.raises(QuorumNotMetException):
            ledger.reorg_holder_baskets(ALICE, sigs, [b0.basket], [out.basket])
        assert ledger.owner(b0.basket) == ALICE
        assert ledger.basket_state(out.basket).state is BasketState.UNKNOWN

    def test_duplicated_signature_fails_quorum(self):
        ledger, keypairs, b0 = _minted()
        out = make_record(value=100)
        sig = sign_reorg(keypairs[:1], [b0.basket], [out.basket])[0]

        with pytest.raises(QuorumNotMetException):
            ledger.reorg_holder_baskets(ALICE, [sig, sig], [b0.basket], [out.basket])

    def test_signatures_over_other_ordering_fail(self):
        ledger, keypairs, b0 = _minted()
        b1, b2 = make_record(value=40), make_record(value=60)
        sigs = sign_reorg(keypairs, [b0.basket], [b2.basket, b1.basket])

        with pytest.raises(QuorumNotMetException):
            ledger.reorg_holder_baskets(ALICE, sigs, [b0.basket], [b1.basket, b2.basket])

    def test_unauthorized_oracle_ignored(self):
        ledger, keypairs, b0 = _minted()
        outsiders = make_keypairs(2, offset=20)
        out = make_record(value=100)
        sigs = sign_reorg([keypairs[0], *outsiders], [b0.basket], [out.basket])

        with pytest.raises(QuorumNotMetException) as exc_info:
            ledger.reorg_holder_baskets(ALICE, sigs, [b0.basket], [out.basket])
        assert exc_info.value.details["valid_signers"] == 1

    def test_input_owned_by_other(self):
        ledger, keypairs, b0 = _minted()
        out = make_record(value=100)
        sigs = sign_reorg(keypairs, [b0.basket], [out.basket])

        with pytest.raises(UnauthorizedException):
            ledger.reorg_holder_baskets(BOB, sigs, [b0.basket], [out.basket])

    def test_output_collides_with_existing(self):
        ledger, keypairs, b0 = _minted()
        sigs = sign_reorg(keypairs, [b0.basket], [ledger.total_supply(1)])

        with pytest.raises(DuplicateBasketException):
            ledger.reorg_holder_baskets(ALICE, sigs, [b0.basket], [b0.basket])

    def test_output_already_spent(self):
        ledger, keypairs, b0 = _minted()
        b1, b2 = make_record(value=50), make_record(value=50)
        ledger.reorg_holder_baskets(
            ALICE, sign_reorg(keypairs, [b0.basket], [b1.basket, b2.basket]),
            [b0.basket], [b1.basket, b2.basket],
        )
        ledger.burn(ALICE, [b1.basket])
        sigs = sign_reorg(keypairs, [b2.basket], [b1.basket])

        with pytest.raises(DuplicateBasketException):
            ledger.reorg_holder_baskets(ALICE, sigs, [b2.basket], [b1.basket])

    def test_duplicate_outputs(self):
        ledger, keypairs, b0 = _minted()
        out = make_record(value=50)
        sigs = sign_reorg(keypairs, [b0.basket], [out.basket, out.basket])

        with pytest.raises(DuplicateBasketException):
            ledger.reorg_holder_baskets(ALICE, sigs, [b0.basket], [out.basket, out.basket])

    def test_empty_inputs_rejected(self):
        ledger, keypairs, _ = _minted()
        out = make_record(value=0)

        with pytest.raises(InvalidBasketException):
            ledger.reorg_holder_baskets(ALICE, sign_reorg(keypairs, [], [out.basket]), [], [out.basket])

    def test_empty_outputs_allowed(self):
        """A zero-value basket can be reorged away entirely."""
        ledger, keypairs, b0 = _minted()
        zero, rest = make_record(value=0), make_record(value=100)
        ledger.reorg_holder_baskets(
            ALICE, sign_reorg(keypairs, [b0.basket], [zero.basket, rest.basket]),
            [b0.basket], [zero.basket, rest.basket],
        )

        ledger.reorg_holder_baskets(ALICE, sign_reorg(keypairs, [zero.basket], []), [zero.basket], [])

        assert ledger.basket_state(zero.basket).state is BasketState.SPENT

    def test_rejection_leaves_no_trace(self):
        ledger, keypairs, b0 = _minted()
        out = make_record(value=100)
        before = _snapshot(ledger, [b0.basket, out.basket])

        with pytest.raises(QuorumNotMetException):
            ledger.reorg_holder_baskets(ALICE, [], [b0.basket], [out.basket])

        assert _snapshot(ledger, [b0.basket, out.basket]) == before


class TestReorgSupplyBaskets:

    def test_split_supply_then_mint_part(self, ledger_with_token):
        ledger, keypairs, supply = ledger_with_token
        s1, s2 = make_record(value=30), make_record(value=70)
        sigs = sign_reorg(keypairs, [supply.basket], [s1.basket, s2.basket])

        event = ledger.reorg_supply_baskets(OPERATOR, sigs, [supply.basket], [s1.basket, s2.basket])
        ledger.mint(OPERATOR, [s1.basket], ALICE)

        assert event.event == "ReorgSupplyBaskets"
        assert ledger.owner(s1.basket) == ALICE
        assert ledger.basket_state(s2.basket).state is BasketState.LIVE_SUPPLY
        assert ledger.total_supply(1) == supply.basket

    def test_holder_basket_is_not_supply(self):
        ledger, keypairs, b0 = _minted()
        out = make_record(value=100)

        with pytest.raises(InvalidBasketException):
            ledger.reorg_supply_baskets(
                OPERATOR, sign_reorg(keypairs, [b0.basket], [out.basket]), [b0.basket], [out.basket]
            )

    def test_operator_only(self, ledger_with_token):
        ledger, keypairs, supply = ledger_with_token
        out = make_record(value=100)

        with pytest.raises(UnauthorizedException):
            ledger.reorg_supply_baskets(
                ALICE, sign_reorg(keypairs, [supply.basket], [out.basket]), [supply.basket], [out.basket]
            )


class TestAuditTrail:

    def test_one_event_per_mutation_in_order(self):
        ledger, keypairs, b0 = _minted()
        b1, b2 = make_record(value=40), make_record(value=60)
        ledger.reorg_holder_baskets(
            ALICE, sign_reorg(keypairs, [b0.basket], [b1.basket, b2.basket]),
            [b0.basket], [b1.basket, b2.basket],
        )
        ledger.transfer(ALICE, [b1.basket], BOB)
        ledger.burn(BOB, [b1.basket])

        kinds = [e.event for e in ledger.audit_log]
        sequences = [e.sequence for e in ledger.audit_log]

        assert kinds == ["CreateToken", "Mint", "ReorgHolderBaskets", "Transfer", "Burn"]
        assert sequences == [1, 2, 3, 4, 5]

    def test_failed_calls_emit_nothing(self, ledger_with_token):
        ledger, _, supply = ledger_with_token

        for call in (
            lambda: ledger.mint(ALICE, [supply.basket], ALICE),
            lambda: ledger.burn(ALICE, [supply.basket]),
            lambda: ledger.update_master_data(OPERATOR, 1, 5, "0x" + "00" * 32, "0x" + "11" * 32),
        ):
            with pytest.raises(Exception):
                call()

        assert len(ledger.audit_log) == 1
