import pytest
from keynotes.codec import decode_entry, decode_header, encode_entry, encode_header, ensure_newline,\
    is_valid_section_name
from keynotes.errors import FormatError


def test_encode_header():
    assert encode_header('fruits') == '<fruits>\n'


def test_decode_header():
    assert decode_header('<fruits>\n') == 'fruits'
    assert decode_header('<fruits>') == 'fruits'
    assert decode_header('<fruits>\r\n') == 'fruits'


def test_decode_header_stops_at_first_delimiter():
    assert decode_header('<fruits>trailing\n') == 'fruits'


def test_decode_header_rejects_non_headers():
    assert decode_header('fruits>\n') is None
    assert decode_header('<fruits\n') is None
    assert decode_header('\n') is None
    assert decode_header('') is None
    # entry lines contain both delimiters, but always start with a tab
    assert decode_header('\t<apple>red<~>\n') is None
    assert decode_header('<fru\tits>\n') is None


def test_header_round_trip():
    for name in ['a', 'fruits', 'CamelCase', 'über', 'Ωmega']:
        assert decode_header(encode_header(name)) == name


def test_is_valid_section_name():
    assert is_valid_section_name('fruits')
    assert is_valid_section_name('Café')
    assert not is_valid_section_name('')
    assert not is_valid_section_name('two words')
    assert not is_valid_section_name('snake_case')
    assert not is_valid_section_name('abc123')
    assert not is_valid_section_name('<abc>')


def test_encode_entry():
    assert encode_entry('apple', 'red') == '\t<apple>red<~>\n'
    assert encode_entry('apple', '') == '\t<apple><~>\n'


def test_encode_entry_rejects_unrepresentable_pairs():
    with pytest.raises(FormatError, match="must not contain '>'"):
        encode_entry('a>b', 'value')
    with pytest.raises(FormatError, match="must not contain '<~>'"):
        encode_entry('key', 'one<~>two')
    with pytest.raises(FormatError, match='line breaks'):
        encode_entry('key', 'one\ntwo')
    with pytest.raises(FormatError, match='line breaks'):
        encode_entry('k\ney', 'value')


def test_decode_entry():
    assert decode_entry('\t<apple>red<~>\n') == ('apple', 'red')
    assert decode_entry('\t<apple>red<~>') == ('apple', 'red')
    assert decode_entry('\t<apple><~>\n') == ('apple', '')


def test_decode_entry_value_may_contain_delimiters():
    assert decode_entry('\t<url>https://example.com/<a>?x=<~~><~>\n') == ('url', 'https://example.com/<a>?x=<~~>')


def test_decode_entry_rejects_non_entries():
    assert decode_entry('<fruits>\n') is None
    assert decode_entry('\tno delimiter\n') is None
    assert decode_entry('  <apple>red<~>\n') is None
    assert decode_entry('\n') is None


def test_entry_round_trip():
    pairs = [
        ('apple', 'red'),
        ('with spaces', 'and <angle> brackets'),
        ('tilde~', 'ends with <~'),
        ('', 'empty key'),
        ('unicode ✓', 'ünïcödé'),
    ]
    for key, value in pairs:
        assert decode_entry(encode_entry(key, value)) == (key, value)


def test_ensure_newline():
    assert ensure_newline('abc') == 'abc\n'
    assert ensure_newline('abc\n') == 'abc\n'
    assert ensure_newline('') == '\n'


def test_encode_entry_rejects_lone_surrogates():
    with pytest.raises(FormatError, match='not valid UTF-8'):
        encode_entry('apple', 'red\udcff')
    with pytest.raises(FormatError, match='not valid UTF-8'):
        encode_entry('app\udcffle', 'red')
