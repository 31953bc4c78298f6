from groupbotkit.nsfw import Picture, auto_judge, judge


def test_judge_neutral():
    assert judge(Picture(neutral=0.9)) == "普通哦"


def test_judge_drawing_with_tag():
    assert judge(Picture(drawings=0.5, neutral=0.1, hentai=0.5)) == "二次元" + " hentai"


def test_judge_low_neutral_counts_as_drawing():
    assert judge(Picture(neutral=0.1)) == "二次元"


def test_judge_neutral_at_threshold_is_real():
    assert judge(Picture(neutral=0.3, sexy=0.6)) == "三次元" + " hso"


def test_judge_tag_order():
    result = judge(Picture(drawings=0.9, hentai=0.5, porn=0.5, sexy=0.5))
    assert result == "二次元" + " hentai" + " porn" + " hso"


def test_auto_judge_neutral_is_silent():
    assert auto_judge(Picture(neutral=0.8, porn=0.9)) is None


def test_auto_judge_without_tags_is_silent():
    assert auto_judge(Picture(drawings=0.9)) is None


def test_auto_judge_flags():
    assert auto_judge(Picture(drawings=0.1, neutral=0.1, porn=0.9)) == "三次元" + " porn"
    assert auto_judge(Picture(drawings=0.5, hentai=0.5)) == "二次元" + " hentai"