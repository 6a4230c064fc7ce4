from lhotse.serialization import load_jsonl
from wenetprep.errors import MissingPrerequisiteError
from wenetprep.lexicons.Vocabulary import prepare_words
from wenetprep.tokenizers.text2token import get_tokenizer
from pathlib import Path
import logging


variants = [
    'char',
    'pinyin',
    'lazy_pinyin',
]


def read_transcripts(supervisions):
    '''
        Yields the text of each supervision in a (gzipped) jsonl manifest.
    '''
    for sup in load_jsonl(supervisions):
        yield str(sup['text']).replace('"', '')


def prepare_lang_text(supervisions, lang_dir, variant):
    '''
        Writes lang_dir/text (one tokenized utterance per line) and
        lang_dir/words.txt for one lexicon variant.

        Inputs:
            :param supervisions: the supervisions manifest of the L subset
            :param lang_dir: the output lang directory
            :param variant: one of char, pinyin, lazy_pinyin
            :return: the vocabulary written to words.txt
    '''
    if variant not in variants:
        raise ValueError(f"Expected {variant} to be an element in {variants}")
    if not Path(supervisions).is_file():
        raise MissingPrerequisiteError(
            f"{supervisions} does not exist. Prepare the manifests first"
        )

    lang_dir = Path(lang_dir)
    lang_dir.mkdir(parents=True, exist_ok=True)
    tokenizer = get_tokenizer(variant)
    with open(lang_dir / 'text', 'w', encoding='utf-8') as f:
        for l in tokenizer.tokenize_lines(read_transcripts(supervisions)):
            print(l, file=f)

    vocab = prepare_words(lang_dir / 'text', lang_dir / 'words.txt')
    logging.info(f"{lang_dir}/words.txt: {len(vocab)} symbols")
    return vocab
