from lhotse import Fbank, FbankConfig, LilcomChunkyWriter
from lhotse import CutSet, RecordingSet, SupervisionSet, combine, load_manifest
from lhotse.recipes import prepare_wenet_speech
from wenetprep.errors import MissingPrerequisiteError
from wenetprep.pipeline.FileSystem import LocalFileSystem
from pathlib import Path
from tqdm import tqdm
import unicodedata
import logging
import re
import torch


torch.set_num_threads(1)
torch.set_num_interop_threads(1)


partitions = [
    'L',
    'DEV',
    'TEST_NET',
    'TEST_MEETING',
]

dev_test_partitions = [
    'DEV',
    'TEST_NET',
    'TEST_MEETING',
]


def check_corpus(corpus_dir, fs=None):
    '''
        WenetSpeech needs credentials to download, so it has to be put in
        place (or symlinked) by hand.
    '''
    fs = fs if fs is not None else LocalFileSystem()
    corpus_dir = Path(corpus_dir)
    fs.mkdir(corpus_dir)
    if (
        not fs.is_dir(corpus_dir / 'wenet_speech')
        and not fs.is_file(corpus_dir / 'metadata' / 'v1.list')
    ):
        raise MissingPrerequisiteError(
            f"should download WenetSpeech first. Expected {corpus_dir}/wenet_speech "
            f"or {corpus_dir}/metadata/v1.list. See "
            "https://github.com/wenet-e2e/WenetSpeech#download"
        )


def prepare_manifests(corpus_dir, odir, num_jobs=15):
    odir = Path(odir)
    odir.mkdir(parents=True, exist_ok=True)
    prepare_wenet_speech(corpus_dir, output_dir=odir, num_jobs=num_jobs)


def manifest_path(manifests, kind, part):
    '''
        lhotse has written WenetSpeech manifests both with and without a
        "wenetspeech_" prefix. Return whichever exists, defaulting to the
        unprefixed name.
    '''
    manifests = Path(manifests)
    for prefix in ('', 'wenetspeech_'):
        path = manifests / f'{prefix}{kind}_{part}.jsonl.gz'
        if path.is_file():
            return path
    return manifests / f'{kind}_{part}.jsonl.gz'


def normalize_text(text,
    punct_tags=re.compile(r'<(COMMA|PERIOD|QUESTIONMARK|EXCLAMATIONPOINT)>'),
    whitespace=re.compile(r'\s+'),
):
    '''
        Removes the WenetSpeech punctuation tags (<COMMA>, <PERIOD> ...) and
        any unicode P* character, then collapses runs of whitespace.
    '''
    text = punct_tags.sub('', text)
    text = ''.join(
        c for c in text if not unicodedata.category(c).startswith('P')
    )
    return whitespace.sub(' ', text).strip()


def preprocess_cuts(manifests, part, odir, speed_perturb=None):
    '''
        Builds the raw (featureless) cuts of a WenetSpeech partition.

        Inputs:
            :param manifests: directory with the recordings / supervisions
            :param part: the WenetSpeech partition
            :param odir: where cuts_{part}_raw.jsonl.gz is written
            :param speed_perturb: add 0.9 and 1.1 speed perturbed copies.
                Defaults to True for the training partition only.
            :return: the path of the raw cuts
    '''
    if part not in partitions:
        raise ValueError(f"Expected {part} to be an element in {partitions}")
    if speed_perturb is None:
        speed_perturb = part not in dev_test_partitions

    raw_cuts_path = Path(odir) / f'cuts_{part}_raw.jsonl.gz'
    if raw_cuts_path.is_file():
        logging.info(f"{raw_cuts_path} exists - skipping {part}")
        return raw_cuts_path

    recos = RecordingSet.from_jsonl(manifest_path(manifests, 'recordings', part))
    sups = SupervisionSet.from_jsonl(
        manifest_path(manifests, 'supervisions', part)
    ).transform_text(normalize_text)

    cut_set = CutSet.from_manifests(
        recordings=recos,
        supervisions=sups,
    )
    cut_set = cut_set.trim_to_supervisions(keep_overlapping=False)
    if speed_perturb:
        logging.info(f"Speed perturb for {part} with factors 0.9 and 1.1")
        cut_set = (
            cut_set
            + cut_set.perturb_speed(0.9)
            + cut_set.perturb_speed(1.1)
        )
    cut_set.to_file(raw_cuts_path)
    return raw_cuts_path


def preprocess_wenet_speech(manifests, odir, parts=partitions):
    Path(odir).mkdir(parents=True, exist_ok=True)
    for part in parts:
        logging.info(f"Preprocessing {part}")
        preprocess_cuts(manifests, part, odir)


def compute_fbank_dev_test(odir, num_mel_bins=80, num_jobs=15,
    parts=dev_test_partitions,
):
    extractor = Fbank(FbankConfig(num_mel_bins=num_mel_bins))
    for part in tqdm(parts):
        cuts_path = Path(odir) / f'cuts_{part}.jsonl.gz'
        if cuts_path.is_file():
            logging.info(f"{cuts_path} exists - skipping")
            continue

        cut_set = CutSet.from_file(Path(odir) / f'cuts_{part}_raw.jsonl.gz')
        cut_set = cut_set.compute_and_store_features(
            extractor=extractor,
            storage_path=f"{odir}/feats_{part}",
            num_jobs=num_jobs,
            storage_type=LilcomChunkyWriter,
        )
        cut_set.to_file(cuts_path)


def split_name(prefix, idx, num_splits):
    '''
        Pieces are numbered from 1 and zero padded to the width of
        num_splits, e.g., cuts_L_raw.0007.jsonl.gz for 1000 splits.
    '''
    idx = f"{idx}".zfill(len(str(num_splits)))
    return f'{prefix}.{idx}.jsonl.gz'


def split_cuts(raw_cuts_path, split_dir, num_splits, prefix='cuts_L_raw'):
    '''
        Splits the raw cuts into num_splits pieces written to split_dir.

        :return: the list of paths written
    '''
    split_dir = Path(split_dir)
    split_dir.mkdir(parents=True, exist_ok=True)
    cut_set = CutSet.from_file(raw_cuts_path)
    pieces = []
    for idx, piece in enumerate(cut_set.split(num_splits=num_splits), 1):
        path = split_dir / split_name(prefix, idx, num_splits)
        piece.to_file(path)
        pieces.append(path)
    return pieces


def compute_fbank_splits(split_dir, num_splits, start=0, stop=-1,
    num_mel_bins=80, num_workers=20, batch_duration=600.0,
):
    '''
        Computes features for pieces start .. stop - 1 (0-based, stop=-1
        means up to num_splits) of the split L subset. A piece whose
        output already exists is skipped, so this can be resumed.
    '''
    split_dir = Path(split_dir)
    stop = num_splits if stop < 0 else min(stop, num_splits)
    extractor = Fbank(FbankConfig(num_mel_bins=num_mel_bins))
    logging.info(f"Computing features for pieces {start + 1} to {stop}")
    for i in tqdm(range(start, stop)):
        raw_cuts_path = split_dir / split_name('cuts_L_raw', i + 1, num_splits)
        cuts_path = split_dir / split_name('cuts_L', i + 1, num_splits)
        if cuts_path.is_file():
            logging.info(f"{cuts_path} exists - skipping")
            continue
        if not raw_cuts_path.is_file():
            logging.warning(f"{raw_cuts_path} does not exist - skipping it")
            continue

        cut_set = CutSet.from_file(raw_cuts_path)
        cut_set = cut_set.compute_and_store_features_batch(
            extractor=extractor,
            storage_path=f"{split_dir}/feats_L_{i + 1}",
            num_workers=num_workers,
            batch_duration=batch_duration,
            storage_type=LilcomChunkyWriter,
        )
        cut_set.to_file(cuts_path)


def combine_pieces(split_dir, cuts_path, num_splits, pattern='cuts_L.*.jsonl.gz'):
    '''
        Concatenates the finished pieces of the L subset. All num_splits
        pieces have to exist, otherwise cuts would silently go missing.
    '''
    pieces = sorted(Path(split_dir).glob(pattern))
    if len(pieces) != num_splits:
        raise MissingPrerequisiteError(
            f"Expected {num_splits} pieces matching {split_dir}/{pattern}, "
            f"found {len(pieces)}. Compute the features for L first"
        )
    logging.info(f"Combining {len(pieces)} pieces into {cuts_path}")
    cut_set = combine(*[load_manifest(p) for p in pieces])
    cut_set.to_file(cuts_path)
    return cuts_path
