from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class PipelineConfig:
    '''
        Settings for one run of the pipeline. Never mutated once built.

            :param stage: the first stage to run
            :param stop_stage: the last stage to run (inclusive)
            :param num_splits: number of pieces the L subset is split into
            :param dl_dir: where the raw corpora live
            :param num_jobs: number of jobs for manifest preparation and
                feature extraction
            :param workdir: the recipe directory; outputs go to workdir/data
    '''
    stage: int = 0
    stop_stage: int = 100
    num_splits: int = 1000
    dl_dir: Path = field(default_factory=lambda: Path.cwd() / 'download')
    num_jobs: int = 15
    workdir: Path = field(default_factory=Path.cwd)
    num_mel_bins: int = 80
    num_workers: int = 20
    batch_duration: float = 600.0
    split_start: int = 0
    split_stop: int = -1

    @property
    def data_dir(self):
        return Path(self.workdir) / 'data'

    @property
    def manifest_dir(self):
        return self.data_dir / 'manifests'

    @property
    def fbank_dir(self):
        return self.data_dir / 'fbank'

    @property
    def split_dir(self):
        return self.fbank_dir / f'L_split_{self.num_splits}'

    def lang_dir(self, variant):
        return self.data_dir / f'lang_{variant}'

    def in_range(self, index):
        return self.stage <= index <= self.stop_stage
