from groupbotkit.runcode import TRUNCATION_SUFFIX, cut_too_long


def test_short_text_unchanged():
    assert cut_too_long("hello\nworld") == "hello\nworld"


def test_thirty_lines_unchanged():
    text = "a\n" * 30
    assert cut_too_long(text) == text


def test_crlf_counts_once():
    text = "a\r\n" * 30
    assert cut_too_long(text) == text


def test_bare_cr_counts():
    text = "a\r" * 31
    result = cut_too_long(text)
    assert result.endswith(TRUNCATION_SUFFIX)


def test_too_many_lines_truncated():
    text = "a\n" * 40
    result = cut_too_long(text)
    assert result.endswith(TRUNCATION_SUFFIX)
    body = result[: -len(TRUNCATION_SUFFIX)]
    assert text.startswith(body)
    assert body.count("\n") <= 30


def test_length_limit_boundary():
    text = "x" * 1001
    assert cut_too_long(text) == text


def test_long_text_truncated():
    text = "y" * 5000
    result = cut_too_long(text)
    assert result == text[:1000] + TRUNCATION_SUFFIX