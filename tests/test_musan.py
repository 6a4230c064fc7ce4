import pytest

from wenetprep.dataprep import musan


def test_existing_cuts_are_kept(tmp_path):
    cuts_path = tmp_path / "musan_cuts.jsonl.gz"
    cuts_path.write_bytes(b"")
    assert musan.prepare_fbank_cuts(tmp_path, tmp_path) == cuts_path
    assert cuts_path.read_bytes() == b""


def test_missing_manifests(tmp_path):
    with pytest.raises(ValueError, match="Missing musan manifests"):
        musan.prepare_fbank_cuts(tmp_path / "manifests", tmp_path / "fbank")
