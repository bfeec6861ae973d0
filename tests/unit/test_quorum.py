"""
Oracle Quorum Configuration Unit Tests
Tests for core/ledger/quorum.py
"""
import pytest
from pydantic import ValidationError

from core.crypto.commitment import reorg_digest
from core.ledger.quorum import OracleQuorumConfig
from core.schemas.errors import QuorumNotMetException

from fixtures.common import make_keypair, make_keypairs, make_quorum_config


DIGEST = reorg_digest(["0x" + "aa" * 32], ["0x" + "bb" * 32])


class TestConstruction:

    def test_valid_config(self, keypairs):
        config = make_quorum_config(keypairs, 2)

        assert config.min_number_of_oracles == 2
        assert config.oracles == frozenset(kp.public_key for kp in keypairs)

    def test_zero_threshold_rejected(self, keypairs):
        with pytest.raises(ValidationError):
            make_quorum_config(keypairs, 0)

    def test_unreachable_threshold_rejected(self, keypairs):
        with pytest.raises(ValidationError):
            make_quorum_config(keypairs, 4)

    def test_duplicate_oracles_rejected(self):
        key = make_keypair(0).public_key

        with pytest.raises(ValidationError):
            OracleQuorumConfig(min_number_of_oracles=1, oracles=[key, key.upper().replace("0X", "0x")])

    def test_malformed_oracle_key_rejected(self):
        with pytest.raises(ValidationError):
            OracleQuorumConfig(min_number_of_oracles=1, oracles=["oracle-1"])

    def test_empty_oracle_set_rejected(self):
        with pytest.raises(ValidationError):
            OracleQuorumConfig(min_number_of_oracles=1, oracles=[])

    def test_immutable(self, quorum_config):
        with pytest.raises(ValidationError):
            quorum_config.min_number_of_oracles = 1


class TestValidSigners:

    def test_counts_distinct_valid_signers(self, keypairs, quorum_config):
        sigs = [kp.sign(DIGEST) for kp in keypairs[:2]]

        assert quorum_config.valid_signers(DIGEST, sigs) == {kp.public_key for kp in keypairs[:2]}

    def test_repeated_signer_counts_once(self, keypairs, quorum_config):
        sig = keypairs[0].sign(DIGEST)

        assert len(quorum_config.valid_signers(DIGEST, [sig, sig])) == 1
        assert not quorum_config.has_quorum(DIGEST, [sig, sig])

    def test_unauthorized_signer_ignored(self, keypairs, quorum_config):
        outsider = make_keypairs(1, offset=10)[0]
        sigs = [keypairs[0].sign(DIGEST), outsider.sign(DIGEST)]

        assert quorum_config.valid_signers(DIGEST, sigs) == {keypairs[0].public_key}

    def test_signature_over_other_digest_ignored(self, keypairs, quorum_config):
        other = reorg_digest(["0x" + "aa" * 32], [])
        sigs = [keypairs[0].sign(DIGEST), keypairs[1].sign(other)]

        assert quorum_config.valid_signers(DIGEST, sigs) == {keypairs[0].public_key}


class TestRequireQuorum:

    def test_one_of_two_fails(self, keypairs, quorum_config):
        with pytest.raises(QuorumNotMetException) as exc_info:
            quorum_config.require_quorum(DIGEST, [keypairs[0].sign(DIGEST)])

        assert exc_info.value.details["valid_signers"] == 1
        assert exc_info.value.details["required"] == 2

    def test_two_of_two_passes(self, keypairs, quorum_config):
        sigs = [kp.sign(DIGEST) for kp in keypairs[1:]]

        assert len(quorum_config.require_quorum(DIGEST, sigs)) == 2

    def test_accepts_generator(self, keypairs, quorum_config):
        signers = quorum_config.require_quorum(DIGEST, (kp.sign(DIGEST) for kp in keypairs))

        assert len(signers) == 3
