import io
import pytest

from wenetprep.tokenizers.CharTokenizer import CharTokenizer
from wenetprep.tokenizers.PinyinTokenizer import PinyinTokenizer, LazyPinyinTokenizer
from wenetprep.tokenizers import text2token


def test_char_tokenizer_drops_whitespace():
    assert CharTokenizer()("你好 世界") == ["你", "好", "世", "界"]


def test_pinyin_tokenizer_has_tone_numbers():
    assert PinyinTokenizer()("中国") == ["zhong1", "guo2"]


def test_lazy_pinyin_tokenizer_has_no_tones():
    assert LazyPinyinTokenizer()("中国") == ["zhong", "guo"]


def test_pinyin_keeps_non_han_words():
    assert LazyPinyinTokenizer()("你好 APP") == ["ni", "hao", "APP"]


def test_tokenize_lines():
    lines = list(CharTokenizer().tokenize_lines(["你好\n", "世界\n"]))
    assert lines == ["你 好", "世 界"]


@pytest.mark.parametrize("name,cls", [
    ("char", CharTokenizer),
    ("pinyin", PinyinTokenizer),
    ("lazy_pinyin", LazyPinyinTokenizer),
])
def test_get_tokenizer(name, cls):
    assert type(text2token.get_tokenizer(name)) is cls


def test_get_tokenizer_unknown():
    with pytest.raises(ValueError):
        text2token.get_tokenizer("bpe")


def test_text2token_main(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("中国\n你好\n"))
    text2token.main(["-t", "lazy_pinyin"])
    assert capsys.readouterr().out == "zhong guo\nni hao\n"
