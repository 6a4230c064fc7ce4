from pypinyin import lazy_pinyin, Style
from .BaseTokenizer import BaseTokenizer


class PinyinTokenizer(BaseTokenizer):
    '''
        Converts Mandarin characters to pinyin syllables using pypinyin.
        Anything pypinyin cannot convert (latin words, digits) is kept as
        is and split on whitespace.
    '''
    name = 'pinyin'

    def __init__(self, style=Style.TONE3):
        '''
            Inputs:
                :param style: the pypinyin style. TONE3 appends the tone
                    number to each syllable, e.g., zhong1 guo2
        '''
        self.style = style

    def prepare_transcript(self, text):
        tokens = []
        for syl in lazy_pinyin(text, style=self.style):
            tokens.extend(syl.split())
        return tokens


class LazyPinyinTokenizer(PinyinTokenizer):
    '''
        Toneless pinyin, e.g., zhong guo
    '''
    name = 'lazy_pinyin'

    def __init__(self):
        super(LazyPinyinTokenizer, self).__init__(style=Style.NORMAL)
