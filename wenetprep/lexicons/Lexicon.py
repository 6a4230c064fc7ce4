import k2
import torch
import logging
from pathlib import Path
from collections import defaultdict
from wenetprep.errors import MissingPrerequisiteError
from wenetprep.lexicons.Vocabulary import EPS, FINAL_SYMBOLS


# Pronunciations of the placeholder words. Every other word of a char or
# pinyin lang is spelled by the single token of the same name.
SPECIAL_PRONS = {
    '<SIL>': 'SIL',
    '<SPOKEN_NOISE>': 'SPN',
    '<UNK>': 'SPN',
}


class Lexicon(object):
    @classmethod
    def from_words_file(cls, filename):
        word2id = k2.SymbolTable.from_file(str(filename))
        lexicon = []
        for w in word2id.symbols:
            if w == EPS or w in FINAL_SYMBOLS:
                continue
            lexicon.append((w, [SPECIAL_PRONS.get(w, w)]))
        # symbols of a k2.SymbolTable come back in no particular order
        lexicon = sorted(lexicon, key=lambda x: word2id[x[0]])
        return cls(lexicon, word2id)

    def __init__(self, lexicon, word2id):
        '''
            Inputs:
                :param lexicon: list of (word, [token, ...]) pairs
                :param word2id: the k2.SymbolTable read from words.txt
        '''
        self.lexicon = lexicon
        self.token2id = {p: i for i, p in enumerate(self.phoneset)}
        self.word2id = word2id

    @property
    def phoneset(self):
        phoneset = set()
        for w, pron in self.lexicon:
            for p in pron:
                phoneset.add(p)
        return [EPS] + sorted(phoneset) + ['#0']

    def write(self, filename):
        with open(filename, 'w', encoding='utf-8') as f:
            for w, pron in self.lexicon:
                print(f"{w} {' '.join(pron)}", file=f)

    def write_tokens(self, filename):
        with open(filename, 'w', encoding='utf-8') as f:
            for p, i in sorted(self.token2id.items(), key=lambda x: x[1]):
                print(f'{p} {i}', file=f)

    def to_fst_no_sil(self, need_self_loops=False):
        """Convert a lexicon to an FST (in k2 format).
        Args:
          need_self_loops:
            If True, add self-loop to states with non-epsilon output symbols
            on at least one arc out of the state. The input label for this
            self loop is `token2id["#0"]` and the output label is `word2id["#0"]`.
        Returns:
          Return an instance of `k2.Fsa` representing the given lexicon.
        """
        loop_state = 0  # words enter and leave from here
        next_state = 1  # the next un-allocated state, will be incremented as we go

        arcs = []

        assert self.word2id[EPS] == 0

        eps = 0

        for word, pieces in self.lexicon:
            assert len(pieces) > 0, f"{word} has no pronunciations"
            cur_state = loop_state

            word = self.word2id[word]
            pieces = [self.token2id[i] for i in pieces]

            for i in range(len(pieces) - 1):
                w = word if i == 0 else eps
                arcs.append([cur_state, next_state, pieces[i], w, 0])
                cur_state = next_state
                next_state += 1

            # now for the last piece of this word
            i = len(pieces) - 1
            w = word if i == 0 else eps
            arcs.append([cur_state, loop_state, pieces[i], w, 0])

        if need_self_loops:
            arcs = self.add_self_loops(
                arcs,
                disambig_token=self.token2id["#0"],
                disambig_word=self.word2id["#0"],
            )

        final_state = next_state
        arcs.append([loop_state, final_state, -1, -1, 0])
        arcs.append([final_state])

        arcs = sorted(arcs, key=lambda arc: arc[0])
        arcs = [" ".join(str(i) for i in arc) for arc in arcs]
        return k2.Fsa.from_str("\n".join(arcs), acceptor=False)

    def add_self_loops(self, arcs, disambig_token, disambig_word):
        """Adds self-loops to states of an FST to propagate disambiguation symbols
        through it. They are added on each state with non-epsilon output symbols
        on at least one arc out of the state.
        See also fstaddselfloops.pl from Kaldi. k2 style FSTs have a single
        final state, which never needs a self-loop.
        Args:
          arcs:
            A list-of-list. The sublist contains
            `[src_state, dest_state, label, aux_label, score]`
          disambig_token:
            It is the token ID of the symbol `#0`.
          disambig_word:
            It is the word ID of the symbol `#0`.
        Return:
          Return new `arcs` containing self-loops.
        """
        states_needs_self_loops = set()
        for src, dst, ilabel, olabel, score in arcs:
            if olabel != 0:
                states_needs_self_loops.add(src)

        ans = [
            [s, s, disambig_token, disambig_word, 0]
            for s in sorted(states_needs_self_loops)
        ]
        return arcs + ans

    def add_disambig_symbols(self):
        """It adds pseudo-token disambiguation symbols #1, #2 and so on
        at the ends of tokens to ensure that all pronunciations are different,
        and that none is a prefix of another.
        See also add_lex_disambig.pl from kaldi.
        Returns:
          The largest disambiguation index used (0 if none was needed).
        """
        # (1) Work out the count of each token-sequence in the lexicon.
        count = defaultdict(int)
        for _, tokens in self.lexicon:
            count[" ".join(tokens)] += 1

        # (2) For each left sub-sequence of each token-sequence, note down
        # that it exists (for identifying prefixes of longer strings).
        issubseq = defaultdict(int)
        for _, tokens in self.lexicon:
            tokens = tokens.copy()
            tokens.pop()
            while tokens:
                issubseq[" ".join(tokens)] = 1
                tokens.pop()

        # (3) For each entry in the lexicon:
        # if the token sequence is unique and is not a
        # prefix of another word, no disambig symbol.
        # Else output #1, or #2, #3, ... if the same token-seq
        # has already been assigned a disambig symbol.
        lexicon = []

        # We start with #1 since #0 has its own purpose
        first_allowed_disambig = 1
        max_disambig = first_allowed_disambig - 1
        last_used_disambig_symbol_of = defaultdict(int)

        for word, tokens in self.lexicon:
            tokenseq = " ".join(tokens)
            assert tokenseq != ""
            if issubseq[tokenseq] == 0 and count[tokenseq] == 1:
                lexicon.append((word, tokens))
                continue

            cur_disambig = last_used_disambig_symbol_of[tokenseq]
            if cur_disambig == 0:
                cur_disambig = first_allowed_disambig
            else:
                cur_disambig += 1

            if cur_disambig > max_disambig:
                max_disambig = cur_disambig
            last_used_disambig_symbol_of[tokenseq] = cur_disambig
            tokenseq += f" #{cur_disambig}"
            lexicon.append((word, tokenseq.split()))

        self.lexicon = lexicon
        next_token_id = max(self.token2id.values()) + 1
        for i in range(1, max_disambig + 1):
            disambig = f"#{i}"
            assert disambig not in self.token2id
            self.token2id[disambig] = next_token_id
            next_token_id += 1
        return max_disambig


def prepare_lang(lang_dir):
    '''
        Creates lexicon.txt, lexicon_disambig.txt, tokens.txt, L.pt and
        L_disambig.pt in lang_dir from lang_dir/words.txt.
    '''
    lang_dir = Path(lang_dir)
    words = lang_dir / 'words.txt'
    if not words.is_file():
        raise MissingPrerequisiteError(
            f"{words} does not exist. Prepare the {lang_dir.name} lang first"
        )

    lexicon = Lexicon.from_words_file(words)
    lexicon.write(lang_dir / 'lexicon.txt')
    L = lexicon.to_fst_no_sil()

    max_disambig = lexicon.add_disambig_symbols()
    logging.info(f"{lang_dir}: max disambiguation symbol #{max_disambig}")
    lexicon.write(lang_dir / 'lexicon_disambig.txt')
    lexicon.write_tokens(lang_dir / 'tokens.txt')
    L_disambig = lexicon.to_fst_no_sil(need_self_loops=True)

    torch.save(L.as_dict(), str(lang_dir / 'L.pt'))
    torch.save(L_disambig.as_dict(), str(lang_dir / 'L_disambig.pt'))
    return lexicon
