class BaseTokenizer(object):
    '''
        Splits a transcript into the tokens of one lexicon variant.
    '''
    name = None

    def __call__(self, text):
        return self.prepare_transcript(text)

    def prepare_transcript(self, text):
        raise NotImplementedError

    def tokenize_lines(self, lines):
        '''
            Yields one space separated line of tokens per input line.
        '''
        for l in lines:
            yield ' '.join(self.prepare_transcript(l.strip()))
