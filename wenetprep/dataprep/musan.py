from lhotse import Fbank, FbankConfig, LilcomChunkyWriter
from lhotse import CutSet, combine
from lhotse.recipes import download_musan, prepare_musan
from lhotse.recipes.utils import read_manifests_if_cached
from wenetprep.pipeline.FileSystem import LocalFileSystem
from pathlib import Path
import logging


partitions = [
    'music',
    'speech',
    'noise',
]


def ensure_musan(dl_dir, fs=None):
    '''
        Downloads musan (http://www.openslr.org/17/) into dl_dir unless
        dl_dir/musan already exists. A pre-downloaded copy can be symlinked.
    '''
    fs = fs if fs is not None else LocalFileSystem()
    if not fs.is_dir(Path(dl_dir) / 'musan'):
        logging.info(f"Downloading musan to {dl_dir}")
        download_musan(dl_dir)


def prepare_manifests(corpus_dir, odir):
    odir = Path(odir)
    odir.mkdir(parents=True, exist_ok=True)
    prepare_musan(corpus_dir, output_dir=odir, parts=partitions)


def prepare_fbank_cuts(manifests, odir, num_mel_bins=80, num_jobs=15,
    window=10.0, min_duration=5.0,
):
    '''
        Cuts all musan recordings into windows of `window` seconds, drops
        windows not longer than min_duration and extracts fbank features.
    '''
    cuts_path = Path(odir) / 'musan_cuts.jsonl.gz'
    if cuts_path.is_file():
        logging.info(f"{cuts_path} exists - skipping")
        return cuts_path

    Path(odir).mkdir(parents=True, exist_ok=True)
    manifests = read_manifests_if_cached(
        dataset_parts=partitions,
        output_dir=manifests,
        prefix='musan',
        suffix='jsonl.gz',
    ) or {}
    missing = [p for p in partitions if p not in manifests]
    if missing:
        raise ValueError(f"Missing musan manifests for {missing}")

    extractor = Fbank(FbankConfig(num_mel_bins=num_mel_bins))
    cut_set = (
        CutSet.from_manifests(
            recordings=combine(*[m['recordings'] for m in manifests.values()])
        )
        .cut_into_windows(window)
        .filter(lambda c: c.duration > min_duration)
    )
    cut_set = cut_set.compute_and_store_features(
        extractor=extractor,
        storage_path=f"{odir}/musan_feats",
        num_jobs=num_jobs,
        storage_type=LilcomChunkyWriter,
    )
    cut_set.to_file(cuts_path)
    return cuts_path
