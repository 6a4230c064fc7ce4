from pathlib import Path


class LocalFileSystem(object):
    '''
        The view of the filesystem used by stage predicates and for writing
        marker files. Tests swap in an in-memory version with the same
        methods.
    '''
    def is_file(self, path):
        return Path(path).is_file()

    def is_dir(self, path):
        return Path(path).is_dir()

    def mkdir(self, path):
        Path(path).mkdir(parents=True, exist_ok=True)

    def touch(self, path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()


def marker_exists(marker):
    '''
        Predicate for stages guarded by a zero-byte marker file.
    '''
    def done(fs):
        return fs.is_file(marker)
    return done


def output_exists(*outputs):
    '''
        Predicate for stages that are done once all of their outputs exist.
    '''
    def done(fs):
        return all(fs.is_file(o) for o in outputs)
    return done
