from app.domain.pinyin_database import CharacterInfo, PinyinDatabase
from app.domain.text_format import grid_cell_text, info_panel_text, line_break


def test_prefix_lookup_accepts_every_prefix_of_a_syllable(database):
    for prefix in ("z", "zh", "zho", "zhon", "zhong"):
        assert database.find(prefix)
    assert not database.find("zhq")
    assert not database.find("q")


def test_is_syllable_requires_exact_match(database):
    assert database.is_syllable("zhong")
    assert not database.is_syllable("zho")
    assert not database.is_syllable("")


def test_real_data_loads(real_database):
    db = real_database
    assert "zh" in db.initials
    assert "ü" in db.finals
    assert db.is_syllable("nü")
    assert db.is_syllable("zhong")
    assert len(db.radicals) == 30
    assert db.info("人").pinyin == "ren2"
    # Every dataset entry has metadata.
    for c in db.radicals + db.characters:
        assert db.info(c) is not None


def test_missing_data_dir_degrades_to_empty(tmp_path):
    db = PinyinDatabase.load(tmp_path)
    assert db.syllables == frozenset()
    assert db.characters == []
    assert not db.find("a")


def test_entries_without_metadata_are_dropped(tmp_path):
    (tmp_path / "characters.yaml").write_text(
        "radicals: [一]\ncharacters: [人, 大]\ndictionary:\n  人: {pinyin: ren2, stroke: 2, english: person}\n",
        encoding="utf-8",
    )
    db = PinyinDatabase.load(tmp_path)
    assert db.characters == ["人"]
    assert db.radicals == []


def test_phonetics_table_spells_known_syllables(database):
    table = database.phonetics_table()
    assert table[0] == ["", *database.initials]
    finals = [row[0] for row in table[1:]]
    assert finals == database.finals
    row_a = table[1 + database.finals.index("a")]
    assert row_a[1 + database.initials.index("m")] == "ma"
    assert row_a[1 + database.initials.index("r")] == ""


def test_character_info_texts():
    info = CharacterInfo("中", "zhong1", 4, "middle; center")
    assert info.code == 0x4E2D
    assert grid_cell_text(info) == "中\n4E2D"
    text = info_panel_text(info)
    assert text.splitlines() == ["中", "PinYin: zhong1", "Strokes: 4", "English: middle; center"]


def test_line_break_wraps_long_lines():
    out = line_break("English: " + "word " * 20, 40)
    assert all(len(line) <= 40 for line in out.splitlines())
    assert len(out.splitlines()) > 1
