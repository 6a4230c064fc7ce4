import argparse
import sys
from .CharTokenizer import CharTokenizer
from .PinyinTokenizer import PinyinTokenizer, LazyPinyinTokenizer


TOKENIZERS = {
    t.name: t for t in (CharTokenizer, PinyinTokenizer, LazyPinyinTokenizer)
}


def get_tokenizer(trans_type):
    if trans_type not in TOKENIZERS:
        raise ValueError(
            f"Expected {trans_type} to be an element in {sorted(TOKENIZERS)}"
        )
    return TOKENIZERS[trans_type]()


def get_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Convert transcripts read on stdin into tokens',
    )
    parser.add_argument('-t', '--trans-type', type=str, default='char',
        choices=sorted(TOKENIZERS),
        help='the kind of token to produce',
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = get_args(argv)
    tokenizer = get_tokenizer(args.trans_type)
    for l in tokenizer.tokenize_lines(sys.stdin):
        print(l)


if __name__ == "__main__":
    main()
