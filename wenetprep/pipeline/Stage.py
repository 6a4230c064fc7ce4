class Stage(object):
    '''
        One numbered step of a pipeline.

        Inputs:
            :param index: the stage number used for --stage / --stop-stage
            :param description: what is logged when the stage runs
            :param action: callable(config, fs) doing the work
            :param done: optional predicate fs -> bool. If it holds the
                action is skipped
            :param marker: optional marker file touched after the action
                succeeds
    '''
    def __init__(self, index, description, action, done=None, marker=None):
        self.index = index
        self.description = description
        self.action = action
        self.done = done
        self.marker = marker

    def is_done(self, fs):
        return self.done is not None and self.done(fs)

    def __repr__(self):
        return f"Stage({self.index}, {self.description!r})"
