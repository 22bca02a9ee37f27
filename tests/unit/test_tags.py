import pytest

from i18n.translations import Language
from utils.tags import PRESET_TAGS, normalize_tag, normalize_tags, tag_label


@pytest.mark.unit
def test_normalize_tag_trims_lowercases_and_hyphenates():
    assert normalize_tag("  Digital Art ") == "digital-art"
    assert normalize_tag("Work\tIn   Progress") == "work-in-progress"
    assert normalize_tag("") == ""


@pytest.mark.unit
def test_normalize_tags_dedupes_and_drops_blanks():
    assert normalize_tags(["Chat", "chat", " ", "question", "CHAT"]) == ["chat", "question"]


@pytest.mark.unit
def test_tag_label_for_presets_and_custom_tags():
    assert PRESET_TAGS == ["general", "question", "chat", "illustration", "progress"]
    assert tag_label("illustration", Language.EN) == "Illustration"
    assert tag_label("illustration", Language.JA) == "イラスト"
    assert tag_label("progress", Language.JA) == "進捗"
    assert tag_label("my-custom-tag", Language.EN) == "my-custom-tag"
