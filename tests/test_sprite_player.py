import pytest

from app.services.sprite_player import AudioSprite, SpritePlayer, SpriteSegment, default_clip_factory


class RecordingClip:
    def __init__(self, log):
        self.log = log

    def play_from(self, position_ms):
        self.log.append(("play", position_ms))

    def stop(self):
        self.log.append(("stop",))


def test_sprite_map_loads_and_skips_malformed_entries(tmp_path):
    p = tmp_path / "sprite.yaml"
    p.write_text("ma1: [100, 400]\nbad: [1]\nneg: [-1, 10]\nzero: [5, 0]\ntext: hello\n", encoding="utf-8")
    sprite = AudioSprite.load(p)
    assert len(sprite) == 1
    assert sprite.get("ma1") == SpriteSegment(100, 400)
    assert "bad" not in sprite


def test_missing_sprite_map_is_empty(tmp_path):
    assert len(AudioSprite.load(tmp_path / "none.yaml")) == 0


def test_real_sprite_map_has_tone_keys():
    from conftest import DATA_DIR

    sprite = AudioSprite.load(DATA_DIR / "sprite.yaml")
    assert sprite.get("ma1") is not None
    assert sprite.get("nv3") is not None


def test_default_factory_is_silent_in_test_mode(tmp_path, monkeypatch):
    monkeypatch.setenv("HANZI_TEST_MODE", "1")
    clip = default_clip_factory(tmp_path / "x.ogg")
    clip.play_from(0)
    clip.stop()


def test_play_starts_at_offset_and_stops_after_duration(qtbot, tmp_path):
    log = []
    player = SpritePlayer(tmp_path / "pinyin.ogg", clip_factory=lambda _p: RecordingClip(log))
    player.play(SpriteSegment(1200, 50))
    assert log == [("play", 1200)]
    assert player.active_count() == 1
    qtbot.waitUntil(lambda: player.active_count() == 0, timeout=2000)
    assert log[-1] == ("stop",)


def test_overlapping_plays_are_independent(qtbot, tmp_path):
    log = []
    player = SpritePlayer(tmp_path / "pinyin.ogg", clip_factory=lambda _p: RecordingClip(log))
    player.play(SpriteSegment(0, 30))
    player.play(SpriteSegment(500, 30))
    assert player.active_count() == 2
    qtbot.waitUntil(lambda: player.active_count() == 0, timeout=2000)
    assert log.count(("stop",)) == 2
