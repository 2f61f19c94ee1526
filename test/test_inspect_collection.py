import json

from class_belief_map.integration import ClassCountIntegrator, InputData
from class_belief_map.map import SubmapCollection, save_submap_collection
from class_belief_map.tools.inspect_collection import main, summarize_collection


def _collection(labelled_frame) -> SubmapCollection:
    collection = SubmapCollection()
    submap = collection.create_submap(0.05, 16)
    ClassCountIntegrator().process_input(submap, InputData(**labelled_frame))
    return collection


def test_summary(labelled_frame):
    summary = summarize_collection(_collection(labelled_frame))
    assert summary["n_submaps"] == 1
    assert summary["submap_ids"] == [0]
    (entry,) = summary["submaps"]
    assert entry["n_blocks"] == 2
    assert entry["n_initialized_voxels"] == 3
    assert entry["class_histogram"] == {"1": 1, "4": 1, "7": 1}


def test_main_prints_and_writes_report(tmp_path, capsys, labelled_frame):
    archive = save_submap_collection(_collection(labelled_frame), tmp_path / "map.npz")
    out = tmp_path / "report.json"

    assert main([str(archive), "--out", str(out)]) == 0

    printed = json.loads(capsys.readouterr().out)
    assert printed == json.loads(out.read_text())
    assert printed["n_submaps"] == 1
