import numpy as np
import pytest

from class_belief_map.config import CodecConfig
from class_belief_map.common.errors import DuplicateSubmapError, StreamConsistencyError
from class_belief_map.integration import ClassCountIntegrator, GroundTruthIntegrator, InputData
from class_belief_map.map import Submap, SubmapCollection, load_submap_collection, save_submap_collection


def _populated_collection(labelled_frame) -> SubmapCollection:
    collection = SubmapCollection()
    integrator = ClassCountIntegrator()
    frame = InputData(**labelled_frame)
    plain = collection.create_submap(0.05, 16, "class")
    integrator.process_input(plain, frame)
    with_uncertainty = collection.create_submap(0.05, 16, "class_uncertainty")
    integrator.process_input(with_uncertainty, frame)
    collection.create_submap(0.1, 8)  # no blocks
    collection.remove_submap(plain.id)
    collection.add_submap(plain)
    return collection


def _assert_same_collection(expected: SubmapCollection, actual: SubmapCollection):
    assert actual.submap_ids == expected.submap_ids
    for submap in expected:
        loaded = actual.get_submap(submap.id)
        assert loaded.voxel_type == submap.voxel_type
        assert loaded.voxel_size == pytest.approx(submap.voxel_size)
        assert loaded.voxels_per_side == submap.voxels_per_side
        assert set(loaded.layer.blocks) == set(submap.layer.blocks)
        for index, block in submap.layer.blocks.items():
            assert loaded.layer.get_block(index).voxels == block.voxels


def test_save_load_round_trip(tmp_path, labelled_frame):
    collection = _populated_collection(labelled_frame)
    path = save_submap_collection(collection, tmp_path / "map.npz")

    assert path.exists()
    loaded = load_submap_collection(path)

    assert loaded.submap_ids == [1, 2, 0]
    assert loaded.index_is_consistent()
    _assert_same_collection(collection, loaded)


def test_narrow_codec_round_trip(tmp_path, labelled_frame, narrow_codec):
    collection = _populated_collection(labelled_frame)
    path = save_submap_collection(collection, tmp_path / "map8.npz", narrow_codec)
    loaded = load_submap_collection(path, narrow_codec)
    _assert_same_collection(collection, loaded)


def test_format_mismatch_rejected(tmp_path, labelled_frame, narrow_codec):
    path = save_submap_collection(_populated_collection(labelled_frame), tmp_path / "map.npz")
    with pytest.raises(ValueError, match="counter_bits"):
        load_submap_collection(path, narrow_codec)


def test_load_into_existing_collection(tmp_path, labelled_frame):
    path = save_submap_collection(_populated_collection(labelled_frame), tmp_path / "map.npz")

    target = SubmapCollection(id_start=50)
    target.create_submap(0.1, 4)
    load_submap_collection(path, CodecConfig(), target)

    assert target.submap_ids == [50, 1, 2, 0]
    assert target.next_id == 51

    with pytest.raises(DuplicateSubmapError):
        load_submap_collection(path, CodecConfig(), target)


def test_empty_collection(tmp_path):
    path = save_submap_collection(SubmapCollection(), tmp_path / "empty.npz")
    loaded = load_submap_collection(path)
    assert len(loaded) == 0
    with np.load(path, allow_pickle=False) as archive:
        assert list(archive["format"]) == [3, 16]


def test_ground_truth_labels_survive_round_trip(tmp_path):
    collection = SubmapCollection()
    submap = collection.create_submap(0.05, 16, "class_uncertainty")
    GroundTruthIntegrator().process_input(submap, InputData(np.zeros((1, 3)), [4]))

    path = save_submap_collection(collection, tmp_path / "gt.npz")
    voxel = load_submap_collection(path).get_submap(submap.id).layer.get_voxel_by_point(np.zeros(3))

    assert voxel.current_index == 4
    assert voxel.is_gt is True
    assert voxel.count_of(4) == 1


def test_duplicate_id_leaves_collection_unchanged(tmp_path, labelled_frame):
    path = save_submap_collection(_populated_collection(labelled_frame), tmp_path / "map.npz")

    target = SubmapCollection()
    target.add_submap(Submap(2))
    with pytest.raises(DuplicateSubmapError):
        load_submap_collection(path, CodecConfig(), target)

    assert target.submap_ids == [2]
    assert target.index_is_consistent()


def test_corrupt_submap_leaves_collection_unchanged(tmp_path, labelled_frame):
    path = save_submap_collection(_populated_collection(labelled_frame), tmp_path / "map.npz")
    with np.load(path, allow_pickle=False) as archive:
        arrays = {key: archive[key] for key in archive.files}
    # Submap 0 is stored last; cut the final word of its last block.
    arrays["submap_0__words"] = arrays["submap_0__words"][:-1]
    corrupt = tmp_path / "corrupt.npz"
    np.savez(corrupt, **arrays)

    target = SubmapCollection(id_start=50)
    target.create_submap(0.1, 4)
    with pytest.raises(StreamConsistencyError):
        load_submap_collection(corrupt, CodecConfig(), target)

    assert target.submap_ids == [50]
