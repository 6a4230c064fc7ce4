import logging
from wenetprep.pipeline.FileSystem import LocalFileSystem


class PipelineRunner(object):
    '''
        Runs the stages of a pipeline whose index lies in
        [config.stage, config.stop_stage] in ascending order. The first
        exception aborts the run and is re-raised untouched.
    '''
    def __init__(self, config, stages, fs=None):
        indices = [s.index for s in stages]
        if len(set(indices)) != len(indices):
            raise ValueError(f"Stage indices must be unique, got {indices}")
        self.config = config
        self.stages = sorted(stages, key=lambda s: s.index)
        self.fs = fs if fs is not None else LocalFileSystem()

    def selected_stages(self):
        return [s for s in self.stages if self.config.in_range(s.index)]

    def run_stage(self, stage):
        logging.info(f"Stage {stage.index}: {stage.description}")
        if stage.is_done(self.fs):
            logging.info(f"Stage {stage.index} is already done. Skipping ...")
            return False
        stage.action(self.config, self.fs)
        if stage.marker is not None:
            self.fs.touch(stage.marker)
        return True

    def run(self):
        '''
            :return: the indices of the stages whose action was run
        '''
        ran = []
        for stage in self.selected_stages():
            if self.run_stage(stage):
                ran.append(stage.index)
        return ran
