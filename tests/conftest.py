from pathlib import Path
import pytest


class FakeFileSystem(object):
    '''
        In-memory stand-in for wenetprep.pipeline.FileSystem.LocalFileSystem
    '''
    def __init__(self, files=(), dirs=()):
        self.files = set(Path(f) for f in files)
        self.dirs = set(Path(d) for d in dirs)
        self.touched = []

    def is_file(self, path):
        return Path(path) in self.files

    def is_dir(self, path):
        return Path(path) in self.dirs

    def mkdir(self, path):
        self.dirs.add(Path(path))

    def touch(self, path):
        self.files.add(Path(path))
        self.touched.append(Path(path))


@pytest.fixture
def fake_fs():
    return FakeFileSystem()
