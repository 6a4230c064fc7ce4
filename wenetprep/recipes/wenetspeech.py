# wenetprep imports
from wenetprep.pipeline.PipelineConfig import PipelineConfig
from wenetprep.pipeline.PipelineRunner import PipelineRunner
from wenetprep.pipeline.Stage import Stage
from wenetprep.pipeline.FileSystem import marker_exists, output_exists
from wenetprep.dataprep import wenetspeech, musan
from wenetprep.dataprep.lang import prepare_lang_text, variants
from wenetprep.errors import WenetPrepError

# Python imports
import argparse
import logging
import sys
from pathlib import Path


###############################################################################
#                       WenetSpeech data preparation
#
# We assume dl_dir (download dir) contains
#
#  - dl_dir/WenetSpeech
#      audio and WenetSpeech.json. The download credentials can be requested
#      by following https://github.com/wenet-e2e/WenetSpeech#download
#      A pre-downloaded copy can be symlinked here.
#
#  - dl_dir/musan
#      music, noise and speech from http://www.openslr.org/17/
#      It is downloaded automatically if missing.
#
# Everything else is written to ./data, which can be removed and regenerated.
###############################################################################
def download_data(config, fs):
    wenetspeech.check_corpus(Path(config.dl_dir) / 'WenetSpeech', fs=fs)
    musan.ensure_musan(config.dl_dir, fs=fs)


def prepare_wenetspeech_manifests(config, fs):
    wenetspeech.prepare_manifests(
        Path(config.dl_dir) / 'WenetSpeech', config.manifest_dir,
        num_jobs=config.num_jobs,
    )


def prepare_musan_manifests(config, fs):
    musan.prepare_manifests(Path(config.dl_dir) / 'musan', config.manifest_dir)


def preprocess_wenetspeech(config, fs):
    wenetspeech.preprocess_wenet_speech(config.manifest_dir, config.fbank_dir)


def compute_fbank_dev_test(config, fs):
    wenetspeech.compute_fbank_dev_test(
        config.fbank_dir,
        num_mel_bins=config.num_mel_bins,
        num_jobs=config.num_jobs,
    )


def split_L(config, fs):
    wenetspeech.split_cuts(
        config.fbank_dir / 'cuts_L_raw.jsonl.gz',
        config.split_dir,
        config.num_splits,
    )


def compute_fbank_L(config, fs):
    wenetspeech.compute_fbank_splits(
        config.split_dir,
        config.num_splits,
        start=config.split_start,
        stop=config.split_stop,
        num_mel_bins=config.num_mel_bins,
        num_workers=config.num_workers,
        batch_duration=config.batch_duration,
    )


def combine_L(config, fs):
    wenetspeech.combine_pieces(
        config.split_dir,
        config.fbank_dir / 'cuts_L.jsonl.gz',
        config.num_splits,
    )


def compute_fbank_musan(config, fs):
    musan.prepare_fbank_cuts(
        config.manifest_dir, config.fbank_dir,
        num_mel_bins=config.num_mel_bins,
        num_jobs=config.num_jobs,
    )


def prepare_lang(variant):
    def action(config, fs):
        prepare_lang_text(
            wenetspeech.manifest_path(config.manifest_dir, 'supervisions', 'L'),
            config.lang_dir(variant),
            variant,
        )
    return action


def prepare_L_disambig(config, fs):
    # k2 is only needed here
    from wenetprep.lexicons.Lexicon import prepare_lang as prepare_lexicon
    for variant in variants:
        lang_dir = config.lang_dir(variant)
        if fs.is_file(lang_dir / 'L_disambig.pt'):
            logging.info(f"{lang_dir}/L_disambig.pt exists - skipping")
            continue
        prepare_lexicon(lang_dir)


def build_stages(config):
    split_marker = config.split_dir / '.split_completed'
    preprocess_marker = config.fbank_dir / '.preprocess_complete'
    return [
        Stage(0, "Download data", download_data),
        Stage(1, "Prepare WenetSpeech manifest", prepare_wenetspeech_manifests),
        Stage(2, "Prepare musan manifest", prepare_musan_manifests),
        Stage(3, "Preprocess WenetSpeech manifest", preprocess_wenetspeech,
            done=marker_exists(preprocess_marker), marker=preprocess_marker,
        ),
        Stage(4,
            "Compute features for DEV and TEST subsets of WenetSpeech "
            "(may take 2 minutes)",
            compute_fbank_dev_test,
        ),
        Stage(5,
            f"Split L subset into {config.num_splits} pieces "
            "(may take 30 minutes)",
            split_L,
            done=marker_exists(split_marker), marker=split_marker,
        ),
        Stage(6, "Compute features for L", compute_fbank_L),
        Stage(7, "Combine features for L", combine_L,
            done=output_exists(config.fbank_dir / 'cuts_L.jsonl.gz'),
        ),
        Stage(8, "Compute fbank for musan", compute_fbank_musan),
        Stage(9, "Prepare char based lang", prepare_lang('char')),
        Stage(10, "Prepare pinyin based lang", prepare_lang('pinyin')),
        Stage(11, "Prepare lazy_pinyin based lang", prepare_lang('lazy_pinyin')),
        Stage(12, "Prepare L_disambig.pt", prepare_L_disambig,
            done=output_exists(
                *[config.lang_dir(v) / 'L_disambig.pt' for v in variants]
            ),
        ),
    ]


def get_args(argv=None):
    '''
        Parse the input arguments
    '''
    parser = argparse.ArgumentParser(
        description='Prepare WenetSpeech and musan for ASR training',
    )
    parser.add_argument('--stage', type=int, default=0, help='the first stage to run')
    parser.add_argument('--stop-stage', type=int, default=100, help='the last stage to run (inclusive)')
    parser.add_argument('--num-splits', type=int, default=1000, help='split the L subset into this many pieces to avoid OOM during feature extraction')
    parser.add_argument('--dl-dir', type=str, default=str(Path.cwd() / 'download'), help='the directory containing WenetSpeech and musan')
    parser.add_argument('--num-jobs', type=int, default=15, help='number of jobs for manifest preparation and feature extraction')
    parser.add_argument('--num-mel-bins', type=int, default=80, help='number of mel filterbanks')
    parser.add_argument('--num-workers', type=int, default=20, help='number of dataloader workers for batched feature extraction of L')
    parser.add_argument('--batch-duration', type=float, default=600.0, help='seconds of audio per batch for feature extraction of L')
    parser.add_argument('--start', type=int, default=0, help='index (0-based) of the first L piece to compute features for')
    parser.add_argument('--stop', type=int, default=-1, help='index (0-based, exclusive) of the last L piece to compute features for. -1 means all pieces')
    return parser.parse_args(argv)


def get_config(args):
    return PipelineConfig(
        stage=args.stage,
        stop_stage=args.stop_stage,
        num_splits=args.num_splits,
        dl_dir=Path(args.dl_dir),
        num_jobs=args.num_jobs,
        workdir=Path.cwd(),
        num_mel_bins=args.num_mel_bins,
        num_workers=args.num_workers,
        batch_duration=args.batch_duration,
        split_start=args.start,
        split_stop=args.stop,
    )


def main(argv=None):
    # Set up logging
    logging.basicConfig(
        format='%(asctime)s (%(filename)s:%(lineno)d:%(funcName)s) %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        level=logging.INFO,
    )
    config = get_config(get_args(argv))
    logging.info(f"dl_dir: {config.dl_dir}")

    # All files generated here are saved in data
    config.data_dir.mkdir(parents=True, exist_ok=True)

    runner = PipelineRunner(config, build_stages(config))
    try:
        runner.run()
    except WenetPrepError as e:
        logging.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
