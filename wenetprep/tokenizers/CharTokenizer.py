from .BaseTokenizer import BaseTokenizer


class CharTokenizer(BaseTokenizer):
    '''
        Each non-whitespace character is a token.
    '''
    name = 'char'

    def prepare_transcript(self, text):
        return [c for c in text if not c.isspace()]
