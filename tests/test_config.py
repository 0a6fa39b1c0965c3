from pathlib import Path

from research_friend.config import AskOptions, ClassificationOptions, load_settings


def test_defaults():
    settings = load_settings({})

    assert settings.ask == AskOptions()
    assert settings.ask.max_input_tokens == 150000
    assert settings.ask.hard_limit_chars == 20 * 1024 * 1024
    assert settings.classification == ClassificationOptions()
    assert settings.stash_root == Path.home() / ".research-friend"
    assert settings.cache_max_bytes == 25 * 1024 * 1024


def test_environment_overrides(tmp_path):
    settings = load_settings(
        {
            "RESEARCH_FRIEND_HOME": str(tmp_path),
            "RESEARCH_FRIEND_ASK_MAX_INPUT_TOKENS": "20000",
            "RESEARCH_FRIEND_ASK_SPLIT_AND_SYNTHESIZE": "yes",
            "RESEARCH_FRIEND_CLASSIFY_CHUNK_COUNT": "7",
            "RESEARCH_FRIEND_RG_PATH": "/opt/rg",
        }
    )

    assert settings.stash_root == tmp_path
    assert settings.ask.max_input_tokens == 20000
    assert settings.ask.split_and_synthesize is True
    assert settings.classification.chunk_count == 7
    assert settings.ripgrep_path == "/opt/rg"


def test_invalid_numbers_fall_back_to_defaults():
    settings = load_settings(
        {
            "RESEARCH_FRIEND_ASK_TIMEOUT_MS": "soon",
            "RESEARCH_FRIEND_ASK_SPLIT_AND_SYNTHESIZE": "nope",
        }
    )
    assert settings.ask.timeout_ms == 300000
    assert settings.ask.split_and_synthesize is False


def test_with_overrides_skips_none():
    base = AskOptions()
    assert base.with_overrides(timeout_ms=None) is base

    changed = base.with_overrides(timeout_ms=1000, split_and_synthesize=None)
    assert changed.timeout_ms == 1000
    assert changed.split_and_synthesize is False
