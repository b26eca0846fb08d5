"""Tests for Proof: accessors, validation, serialization."""

from __future__ import annotations

import pytest

from dagproof.core.block_store import put_value
from dagproof.core.codecs import DagJsonCodec
from dagproof.core.errors import ChainBrokenError, InvalidProofError
from dagproof.core.generator import ProofGenerator
from dagproof.core.hasher import default_identifier_codec
from dagproof.core.proof import Proof
from dagproof.models.proof import ProofEnvelope


def _cid(data: bytes, algorithm: str = "sha256", codec: str = "dag-json"):
    return default_identifier_codec.identifier_of(data, algorithm, codec)


class TestAccessors:
    def test_root_and_nodes(self):
        """Accessors return the root claim and node tuple."""
        proof = Proof(_cid(b'"x"'), [b'"x"'])
        assert proof.root() == _cid(b'"x"')
        assert proof.nodes() == (b'"x"',)
        assert len(proof) == 1

    def test_nodes_are_immutable_copies(self):
        """Mutating the source list does not change the proof."""
        source = [bytearray(b'"x"')]
        proof = Proof(_cid(b'"x"'), source)
        source[0][0] = 0
        assert proof.nodes() == (b'"x"',)

    def test_equality(self):
        """Proofs compare by root and nodes."""
        assert Proof(_cid(b"1"), [b"1"]) == Proof(_cid(b"1"), [b"1"])
        assert Proof(_cid(b"1"), [b"1"]) != Proof(_cid(b"1"), [b"2"])

    def test_rejects_non_identifier_root(self):
        """The root must be a ContentIdentifier."""
        with pytest.raises(TypeError):
            Proof("dag-json:sha256:00", [b"1"])  # type: ignore[arg-type]

    def test_rejects_non_bytes_nodes(self):
        """Nodes must be bytes."""
        with pytest.raises(TypeError):
            Proof(_cid(b"1"), ["1"])  # type: ignore[list-item]


class TestValidate:
    def test_single_node(self):
        """A one-node proof of the root itself is valid."""
        proof = Proof(_cid(b'"x"'), [b'"x"'])
        assert proof.validate() == _cid(b'"x"')
        assert proof.is_valid()

    def test_empty_proof(self):
        """An empty proof is invalid."""
        proof = Proof(_cid(b"1"), [])
        with pytest.raises(InvalidProofError):
            proof.validate()
        assert proof.is_valid() is False

    def test_root_mismatch(self):
        """Node 0 must hash to the root claim."""
        proof = Proof(_cid(b'"x"'), [b'"y"'])
        with pytest.raises(ChainBrokenError) as excinfo:
            proof.validate()
        assert excinfo.value.index == 0

    def test_root_claim_algorithm_is_honoured(self):
        """Node 0 is hashed with the root claim's own algorithm."""
        assert Proof(_cid(b'"x"', "blake3"), [b'"x"']).is_valid()
        wrong_algorithm = _cid(b'"x"', "sha256").model_copy(update={"hash_algorithm": "sha512"})
        assert not Proof(wrong_algorithm, [b'"x"']).is_valid()

    def test_unrelated_second_node(self, worked_dag):
        """A node the previous one does not link breaks at that hop."""
        store = worked_dag.store
        proof = Proof(worked_dag.b, [store.get(worked_dag.b), store.get(worked_dag.a)])
        with pytest.raises(ChainBrokenError) as excinfo:
            proof.validate()
        assert excinfo.value.index == 0

    def test_mixed_hash_algorithms(self, store):
        """Each hop is recomputed under its own link's algorithm."""
        leaf = put_value(store, "leaf", hash_algorithm="blake3")
        middle = put_value(store, {"child": leaf}, hash_algorithm="blake2b-256")
        root = put_value(store, [middle], hash_algorithm="sha512")
        proof = Proof(root, [store.get(root), store.get(middle), store.get(leaf)])
        assert proof.verified_identifiers() == [root, middle, leaf]

    def test_raw_target(self, store):
        """A raw target validates and decodes to bytes."""
        leaf = put_value(store, b"\x00\x01", codec="raw")
        root = put_value(store, {"blob": leaf})
        proof = Proof(root, [store.get(root), store.get(leaf)])
        assert proof.validate() == leaf
        assert proof.decode_target() == b"\x00\x01"

    def test_verified_block_that_does_not_decode(self, store):
        """A verified block that does not decode breaks the chain."""
        broken = b"{not json"
        proof = Proof(_cid(broken), [broken, b"anything"])
        with pytest.raises(ChainBrokenError) as excinfo:
            proof.validate()
        assert excinfo.value.index == 0

    def test_unregistered_link_algorithm_breaks_chain(self):
        """Links under unknown algorithms never match."""
        foreign = default_identifier_codec.identifier_of(b'"leaf"', "sha256", "dag-json")
        foreign = foreign.model_copy(update={"hash_algorithm": "md5"})
        parent = DagJsonCodec().encode([foreign])
        proof = Proof(_cid(parent), [parent, b'"leaf"'])
        with pytest.raises(ChainBrokenError):
            proof.validate()

    def test_same_bytes_linked_under_two_codecs(self, store):
        """A raw alias of an intermediate block does not hide the dag-json path."""
        leaf = put_value(store, "leaf")
        mid = put_value(store, [leaf])
        mid_as_raw = store.put(store.get(mid), codec="raw")
        root = put_value(store, [mid_as_raw, mid])

        proof = ProofGenerator(store).generate_proof_to_cid(leaf, root)
        assert proof.verified_identifiers() == [root, mid, leaf]
        assert proof.decode_target() == "leaf"

    def test_alias_that_does_not_link_onward_is_skipped(self, store):
        """Only the alias under which the block links onward is kept on the path."""
        leaf = put_value(store, "leaf", hash_algorithm="blake3")
        mid = put_value(store, {"next": leaf})
        mid_as_raw = store.put(store.get(mid), codec="raw")
        root = put_value(store, {"a": mid_as_raw, "b": mid})
        proof = Proof(root, [store.get(root), store.get(mid), store.get(leaf)])
        assert proof.validate() == leaf
        assert proof.verified_identifiers()[1] == mid

    def test_final_block_prefers_a_codec_it_decodes_under(self, store):
        """The target identifier is the first matching link whose codec decodes it."""
        data = b"\xff\xfe"
        as_json = store.put(data, codec="dag-json")
        as_raw = store.put(data, codec="raw")
        root = put_value(store, [as_json, as_raw])
        proof = Proof(root, [store.get(root), data])
        assert proof.validate() == as_raw
        assert proof.decode_target() == data

    def test_decode_target_validates_first(self):
        """decode_target refuses an invalid chain."""
        proof = Proof(_cid(b'"x"'), [b'"y"'])
        with pytest.raises(ChainBrokenError):
            proof.decode_target()


class TestSerialization:
    def test_json_round_trip(self, generator, worked_dag):
        """A generated proof survives JSON and still validates."""
        proof = generator.generate_proof_to_cid(worked_dag.d, worked_dag.root)
        loaded = Proof.from_json(proof.to_json())
        assert loaded == proof
        assert loaded.validate() == worked_dag.d

    def test_envelope_fields(self, generator, worked_dag):
        """The envelope carries version, root text and nodes."""
        proof = generator.generate_proof_to_cid(worked_dag.d, worked_dag.b)
        envelope = proof.to_envelope()
        assert envelope.version == 1
        assert envelope.root == str(worked_dag.b)
        assert envelope.nodes == list(proof.nodes())

    def test_loading_does_not_validate(self):
        """Loading an invalid proof succeeds; validating it fails."""
        text = Proof(_cid(b'"x"'), [b'"y"']).to_json()
        loaded = Proof.from_json(text)
        assert loaded.is_valid() is False

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "[]",
            '{"root": "dag-json:sha256:00"}',
            '{"root": "dag-json:sha256:00", "nodes": []}',
            '{"root": "dag-json:sha256:00", "nodes": ["!!!"]}',
            '{"root": "not-an-identifier", "nodes": ["IjEi"]}',
            '{"version": 99, "root": "dag-json:sha256:00", "nodes": ["IjEi"]}',
        ],
    )
    def test_malformed_envelopes(self, text):
        """Malformed envelopes raise InvalidProofError."""
        with pytest.raises(InvalidProofError):
            Proof.from_json(text)

    def test_from_envelope(self):
        """A proof loads from an envelope model."""
        envelope = ProofEnvelope(root=str(_cid(b'"1"')), nodes=[b'"1"'])
        assert Proof.from_envelope(envelope).is_valid()
