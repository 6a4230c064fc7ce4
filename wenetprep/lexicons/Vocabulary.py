from pathlib import Path
from wenetprep.errors import ReservedSymbolError


###############################################################################
#                          Vocabulary (words.txt)
#
# Builds the word symbol table of a lang directory from a stream of
# whitespace separated tokens. The layout is
#
#   <eps> 0
#   <sorted unique tokens + placeholders> 1..N
#   #0 N+1
#   <s> N+2
#   </s> N+3
#
# Sorting is by code point, which for utf-8 text is the same as a byte-wise
# (LC_ALL=C) sort.
###############################################################################
EPS = '<eps>'
PLACEHOLDERS = ('<SIL>', '<SPOKEN_NOISE>', '<UNK>')
FORBIDDEN = ('<s>', '</s>')
FINAL_SYMBOLS = ('#0', '<s>', '</s>')


def collect_tokens(lines):
    '''
        Collect the distinct non-empty tokens of an iterable of text lines.
    '''
    tokens = set()
    for l in lines:
        tokens.update(l.split())
    return tokens


def build_vocabulary(tokens, placeholders=PLACEHOLDERS):
    '''
        Inputs:
            :param tokens: an iterable of tokens (duplicates are fine)
            :param placeholders: symbols that are always in the vocabulary
            :return: dict mapping symbol -> integer id in id order
    '''
    symbols = sorted(set(t for t in tokens if t) | set(placeholders))
    vocab = {EPS: 0}
    for i, sym in enumerate(symbols, 1):
        # <eps> and #0 would otherwise show up twice in the table
        if sym in FORBIDDEN or sym == EPS or sym == '#0':
            raise ReservedSymbolError(sym)
        vocab[sym] = i

    num_symbols = len(symbols)
    for i, sym in enumerate(FINAL_SYMBOLS, num_symbols + 1):
        vocab[sym] = i
    return vocab


def format_symbol_table(vocab):
    return ''.join(f'{sym} {i}\n' for sym, i in vocab.items())


def write_symbol_table(vocab, filename):
    '''
        Writes the table next to its destination first and then moves it
        into place, so a partial words.txt is never observed.
    '''
    filename = Path(filename)
    tmp = filename.with_suffix('')
    with open(tmp, 'w', encoding='utf-8') as f:
        f.write(format_symbol_table(vocab))
    tmp.replace(filename)


def prepare_words(text, words):
    '''
        Build words.txt from the tokenized transcripts in text.

        Inputs:
            :param text: path to a file with one tokenized utterance per line
            :param words: path to the output words.txt
            :return: the vocabulary that was written
    '''
    with open(text, encoding='utf-8') as f:
        tokens = collect_tokens(f)
    vocab = build_vocabulary(tokens)
    write_symbol_table(vocab, words)
    return vocab
