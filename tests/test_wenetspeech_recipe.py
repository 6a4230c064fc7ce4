from pathlib import Path
import pytest

from wenetprep.pipeline.PipelineConfig import PipelineConfig
from wenetprep.pipeline.PipelineRunner import PipelineRunner
from wenetprep.recipes import wenetspeech as recipe


@pytest.fixture
def config():
    return PipelineConfig(num_splits=10, workdir=Path("/work"), dl_dir=Path("/work/download"))


def test_all_stages_are_defined(config):
    stages = recipe.build_stages(config)
    assert [s.index for s in stages] == list(range(13))
    assert stages[5].description.startswith("Split L subset into 10 pieces")


def test_markers(config):
    stages = recipe.build_stages(config)
    assert stages[3].marker == Path("/work/data/fbank/.preprocess_complete")
    assert stages[5].marker == Path("/work/data/fbank/L_split_10/.split_completed")
    assert stages[7].marker is None


def test_default_args():
    args = recipe.get_args([])
    assert (args.stage, args.stop_stage, args.num_splits, args.num_jobs) == (0, 100, 1000, 15)
    assert Path(args.dl_dir) == Path.cwd() / "download"


def test_get_config():
    config = recipe.get_config(recipe.get_args(["--stage", "9", "--stop-stage", "11", "--num-splits", "20"]))
    assert (config.stage, config.stop_stage, config.num_splits) == (9, 11, 20)


def test_preprocess_runs_once(config, fake_fs, monkeypatch):
    calls = []
    monkeypatch.setattr(
        recipe.wenetspeech, "preprocess_wenet_speech", lambda *args: calls.append(args)
    )
    config = PipelineConfig(stage=3, stop_stage=3, workdir=config.workdir)
    stages = recipe.build_stages(config)
    PipelineRunner(config, stages, fs=fake_fs).run()
    PipelineRunner(config, stages, fs=fake_fs).run()
    assert len(calls) == 1
    assert fake_fs.is_file(Path("/work/data/fbank/.preprocess_complete"))


def test_combine_is_skipped_when_output_exists(config, fake_fs, monkeypatch):
    monkeypatch.setattr(recipe.wenetspeech, "combine_pieces", pytest.fail)
    fake_fs.files.add(Path("/work/data/fbank/cuts_L.jsonl.gz"))
    config = PipelineConfig(stage=7, stop_stage=7, workdir=config.workdir)
    assert PipelineRunner(config, recipe.build_stages(config), fs=fake_fs).run() == []


def test_L_disambig_only_for_missing_langs(config, fake_fs, monkeypatch):
    pytest.importorskip("k2")
    import wenetprep.lexicons.Lexicon as Lexicon
    prepared = []
    monkeypatch.setattr(Lexicon, "prepare_lang", prepared.append)
    fake_fs.files.add(Path("/work/data/lang_pinyin/L_disambig.pt"))
    recipe.prepare_L_disambig(config, fake_fs)
    assert prepared == [Path("/work/data/lang_char"), Path("/work/data/lang_lazy_pinyin")]


def test_download_does_not_fetch_existing_musan(config, fake_fs, monkeypatch):
    monkeypatch.setattr(recipe.musan, "download_musan", pytest.fail)
    fake_fs.dirs.update([
        Path("/work/download/WenetSpeech/wenet_speech"),
        Path("/work/download/musan"),
    ])
    recipe.download_data(config, fake_fs)


def test_download_fetches_missing_musan(config, fake_fs, monkeypatch):
    fetched = []
    monkeypatch.setattr(recipe.musan, "download_musan", fetched.append)
    fake_fs.dirs.add(Path("/work/download/WenetSpeech/wenet_speech"))
    recipe.download_data(config, fake_fs)
    assert fetched == [Path("/work/download")]


def test_main_with_empty_range(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert recipe.main(["--stage", "5", "--stop-stage", "4"]) == 0
    assert (tmp_path / "data").is_dir()


def test_main_fails_without_corpus(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(recipe.musan, "download_musan", pytest.fail)
    assert recipe.main(["--stage", "0", "--stop-stage", "12", "--dl-dir", str(tmp_path / "dl")]) == 1
    assert (tmp_path / "dl" / "WenetSpeech").is_dir()


def test_stop_reaches_feature_extraction(monkeypatch):
    seen = {}
    monkeypatch.setattr(
        recipe.wenetspeech, "compute_fbank_splits",
        lambda split_dir, num_splits, **kwargs: seen.update(kwargs),
    )
    config = recipe.get_config(recipe.get_args(["--start", "2", "--stop", "5"]))
    recipe.compute_fbank_L(config, None)
    assert (seen["start"], seen["stop"]) == (2, 5)
    assert recipe.get_config(recipe.get_args([])).split_stop == -1
