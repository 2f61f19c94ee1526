"""
Tests for block and layer serialization.

A block stream must fill every voxel slot and be consumed completely.
"""

import numpy as np
import pytest

from class_belief_map.common import constants
from class_belief_map.common.errors import StreamConsistencyError
from class_belief_map.map import ClassLayer, VoxelBlock
from class_belief_map.serialization import (
    deserialize_block,
    deserialize_layer,
    serialize_block,
    serialize_layer,
)
from class_belief_map.voxels import ClassUncertaintyVoxel, ClassVoxel


def _make_block(voxel_type=constants.VOXEL_TYPE_CLASS) -> VoxelBlock:
    """Block of 8 voxels with two initialized ones."""
    block = VoxelBlock(block_index=(0, 0, 0), voxels_per_side=2, voxel_size=0.1, voxel_type=voxel_type)
    first = block.get_voxel(0, 0, 0)
    first.counts = np.array([0, 3, 1], dtype=np.uint16)
    first.belongs_count = 3
    first.foreign_count = 1
    first.current_index = 1
    last = block.get_voxel(1, 1, 1)
    last.counts = np.array([5], dtype=np.uint16)
    last.belongs_count = 5
    last.current_index = 0
    if voxel_type == constants.VOXEL_TYPE_CLASS_UNCERTAINTY:
        first.uncertainty_value = 0.5
        last.uncertainty_value = 0.125
    return block


def _fresh_like(block: VoxelBlock) -> VoxelBlock:
    return VoxelBlock(
        block_index=block.block_index,
        voxels_per_side=block.voxels_per_side,
        voxel_size=block.voxel_size,
        voxel_type=block.voxel_type,
    )


def _make_layer() -> ClassLayer:
    """Layer with one initialized voxel in each of two blocks."""
    layer = ClassLayer(voxel_size=0.1, voxels_per_side=2)
    a = layer.allocate_block((0, 0, 0)).get_voxel(0, 0, 0)
    a.counts = np.array([1, 2], dtype=np.uint16)
    a.belongs_count = 2
    a.current_index = 1
    b = layer.allocate_block((-1, 2, 0)).get_voxel(1, 0, 0)
    b.counts = np.array([4], dtype=np.uint16)
    b.belongs_count = 4
    b.current_index = 0
    return layer


class TestBlockCodec:
    """Block streams in storage order."""

    def test_word_count(self, codec):
        words = serialize_block(_make_block(), codec)
        expected = 2 * codec.initialized_word_count + 6 * constants.VOXEL_HEADER_WORDS
        assert words.shape[0] == expected

    def test_round_trip(self, codec):
        block = _make_block()
        words = serialize_block(block, codec)

        restored = _fresh_like(block)
        n_initialized = deserialize_block(restored, words, codec)

        assert n_initialized == 2
        for original, decoded in zip(block.voxels, restored.voxels):
            assert decoded == original

    def test_uncertainty_round_trip(self, codec):
        block = _make_block(constants.VOXEL_TYPE_CLASS_UNCERTAINTY)
        words = serialize_block(block, codec)
        expected = 2 * (codec.initialized_word_count + 1) + 6 * constants.VOXEL_HEADER_WORDS
        assert words.shape[0] == expected

        restored = _fresh_like(block)
        deserialize_block(restored, words, codec)
        assert all(isinstance(v, ClassUncertaintyVoxel) for v in restored.voxels)
        assert restored.get_voxel(1, 1, 1).uncertainty_value == pytest.approx(0.125)
        assert restored.voxels == block.voxels

    def test_stream_too_short(self, codec):
        words = serialize_block(_make_block(), codec)
        restored = _fresh_like(_make_block())
        with pytest.raises(StreamConsistencyError):
            deserialize_block(restored, words[: -constants.VOXEL_HEADER_WORDS], codec)

    def test_empty_stream(self, codec):
        with pytest.raises(StreamConsistencyError):
            deserialize_block(_fresh_like(_make_block()), np.zeros((0,), dtype=np.uint32), codec)

    def test_trailing_words(self, codec):
        words = serialize_block(_make_block(), codec)
        padded = np.concatenate([words, np.zeros((3,), dtype=np.uint32)])
        with pytest.raises(StreamConsistencyError):
            deserialize_block(_fresh_like(_make_block()), padded, codec)

    def test_codec_mismatch_detected(self, codec, narrow_codec):
        words = serialize_block(_make_block(), codec)
        with pytest.raises(StreamConsistencyError):
            deserialize_block(_fresh_like(_make_block()), words, narrow_codec)


class TestLayerCodec:
    """Layer streams and the serialization report."""

    def test_exact_report(self, codec):
        layer = _make_layer()
        block_words, report = serialize_layer(layer, codec)

        assert set(block_words) == {(0, 0, 0), (-1, 2, 0)}
        assert report.name == "LayerSerialize"
        assert report.exact is True
        assert report.approximation_triggers == []
        assert report.metrics["n_blocks"] == 2
        assert report.metrics["n_words"] == sum(w.shape[0] for w in block_words.values())

    def test_truncation_report(self, codec):
        layer = _make_layer()
        voxel = layer.get_block((0, 0, 0)).get_voxel(1, 1, 1)
        voxel.counts = np.array([4, 3, 2, 1], dtype=np.uint16)
        voxel.belongs_count = 4
        voxel.current_index = 0

        _, report = serialize_layer(layer, codec)

        assert report.exact is False
        assert "TopKTruncation" in report.approximation_triggers
        assert report.metrics["n_truncated_voxels"] == 1
        report.validate()

    def test_saturation_report(self, narrow_codec):
        layer = _make_layer()
        layer.get_block((0, 0, 0)).get_voxel(0, 0, 0).counts = np.array([1, 400], dtype=np.uint16)

        _, report = serialize_layer(layer, narrow_codec)

        assert report.approximation_triggers == ["CountSaturation"]

    def test_layer_round_trip(self, codec):
        layer = _make_layer()
        block_words, _ = serialize_layer(layer, codec)

        restored = ClassLayer(voxel_size=0.1, voxels_per_side=2)
        n_initialized = deserialize_layer(restored, block_words, codec)

        assert n_initialized == 2
        assert set(restored.blocks) == set(layer.blocks)
        for index, block in layer.blocks.items():
            assert restored.get_block(index).voxels == block.voxels

    def test_corrupt_block_names_index(self, codec):
        block_words, _ = serialize_layer(_make_layer(), codec)
        block_words[(0, 0, 0)] = block_words[(0, 0, 0)][:-1]
        with pytest.raises(StreamConsistencyError, match=r"\(0, 0, 0\)"):
            deserialize_layer(ClassLayer(voxel_size=0.1, voxels_per_side=2), block_words, codec)


def test_plain_voxel_default_block():
    block = VoxelBlock(block_index=(1, 2, 3), voxels_per_side=2, voxel_size=0.5)
    assert block.num_voxels == 8
    assert all(type(v) is ClassVoxel for v in block.voxels)
    assert block.linear_index(1, 1, 1) == 7
    np.testing.assert_allclose(block.origin, [1.0, 2.0, 3.0])
    with pytest.raises(IndexError):
        block.linear_index(2, 0, 0)


class TestFailedDecodeLeavesTargetUnchanged:
    """A stream error must not leave half-decoded voxels behind."""

    def test_block_untouched(self, codec):
        words = serialize_block(_make_block(), codec)
        target = _fresh_like(_make_block())
        before = list(target.voxels)

        with pytest.raises(StreamConsistencyError):
            deserialize_block(target, words[:-1], codec)

        assert all(a is b for a, b in zip(target.voxels, before))
        assert target.num_initialized() == 0

    def test_empty_layer_stays_empty(self, codec):
        block_words, _ = serialize_layer(_make_layer(), codec)
        block_words[(-1, 2, 0)] = block_words[(-1, 2, 0)][:-1]

        target = ClassLayer(voxel_size=0.1, voxels_per_side=2)
        with pytest.raises(StreamConsistencyError):
            deserialize_layer(target, block_words, codec)

        assert not target.blocks

    def test_existing_blocks_kept(self, codec):
        source = _make_layer()
        block_words, _ = serialize_layer(source, codec)
        block_words[(-1, 2, 0)] = block_words[(-1, 2, 0)][:-1]

        target = ClassLayer(voxel_size=0.1, voxels_per_side=2)
        kept = target.allocate_block((0, 0, 0)).get_voxel(0, 0, 0)
        kept.counts = np.array([0, 0, 6], dtype=np.uint16)
        kept.belongs_count = 6
        kept.current_index = 2

        with pytest.raises(StreamConsistencyError):
            deserialize_layer(target, block_words, codec)

        assert set(target.blocks) == {(0, 0, 0)}
        assert target.get_block((0, 0, 0)).get_voxel(0, 0, 0) is kept
        assert target.num_initialized_voxels() == 1
