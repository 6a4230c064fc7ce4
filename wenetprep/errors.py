class WenetPrepError(Exception):
    '''
        Base class for errors raised by the data preparation pipeline.
    '''


class MissingPrerequisiteError(WenetPrepError):
    '''
        A required input (corpus directory, manifest, words.txt ...) is
        absent. These require manual action, so nothing is retried.
    '''


class ReservedSymbolError(WenetPrepError):
    def __init__(self, symbol):
        self.symbol = symbol
        super(ReservedSymbolError, self).__init__(
            f"{symbol} is in the vocabulary!"
        )
