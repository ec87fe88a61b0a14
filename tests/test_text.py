from printserver.printing.text import needs_shaping, shape_text, wrap_text

SENTENCE = "King Fahd Road, Al Olaya District, Building 12, Riyadh 12211, Saudi Arabia"


def test_wrap_respects_width():
    lines = wrap_text(SENTENCE, 20, len)

    assert len(lines) > 1
    assert all(len(line) <= 20 for line in lines)


def test_wrap_preserves_content():
    text = "  Olaya   Street \t near  the\ncentral mall  "
    lines = wrap_text(text, 12, len)

    assert " ".join(lines) == " ".join(text.split())


def test_wrap_is_idempotent():
    once = wrap_text(SENTENCE, 25, len)
    twice = wrap_text(" ".join(once), 25, len)
    assert once == twice


def test_wrap_long_word_gets_own_line():
    lines = wrap_text("PO supercalifragilisticexpialidocious box", 10, len)
    assert lines == ["PO", "supercalifragilisticexpialidocious", "box"]


def test_wrap_blank_text():
    assert wrap_text("", 100, len) == []
    assert wrap_text("   ", 100, len) == []


def test_wrap_fits_on_one_line():
    assert wrap_text("Riyadh", 100, len) == ["Riyadh"]


def test_shape_text_latin_untouched():
    assert not needs_shaping("VAT NO 300000000000003")
    assert shape_text("VAT NO") == "VAT NO"


def test_shape_text_arabic():
    text = "رقم الهاتف"
    shaped = shape_text(text)

    assert needs_shaping(text)
    assert shaped != text
    # Joined presentation forms only, no bare Arabic letters left
    assert not any(0x0600 <= ord(ch) <= 0x06FF for ch in shaped)
    assert len(shaped.split()) == 2


def test_font_measure(fonts):
    narrow = fonts.measure("ab", 24)
    wide = fonts.measure("abcdefgh", 24)
    assert 0 < narrow < wide
