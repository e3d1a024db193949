"""Tests for profile loading and saving."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from domain.models import StreamSettings
from domain.profiles import list_profiles, load_profile, profile_path, save_profile
from shared.constants import MapType

REPO_PROFILES = Path(__file__).parent.parent.parent / 'configs' / 'profiles'


class TestProfiles:
    def test_profile_path(self, tmp_path):
        assert profile_path('x', tmp_path) == tmp_path / 'x.toml'

    def test_list_profiles(self, tmp_path):
        (tmp_path / 'b.toml').write_text('', encoding='utf-8')
        (tmp_path / 'a.toml').write_text('', encoding='utf-8')
        (tmp_path / 'notes.txt').write_text('', encoding='utf-8')
        assert list_profiles(tmp_path) == ['a', 'b']

    def test_list_profiles_missing_dir(self, tmp_path):
        assert list_profiles(tmp_path / 'nope') == []

    def test_save_and_load(self, tmp_path):
        settings = StreamSettings(map_type=MapType.MAP, max_concurrency=2)
        path = save_profile('mine', settings, tmp_path)
        assert path.exists()
        assert load_profile('mine', tmp_path) == settings

    def test_load_by_path(self, tmp_path):
        path = tmp_path / 'custom.toml'
        path.write_text('map_type = "map"\nbase_zoom = 1\n', encoding='utf-8')
        settings = load_profile(str(path))
        assert settings.map_type is MapType.MAP
        assert settings.base_zoom == 1
        assert settings.target_zoom == 3

    def test_missing_profile(self, tmp_path):
        with pytest.raises(FileNotFoundError, match='Profile not found'):
            load_profile('ghost', tmp_path)

    def test_invalid_profile(self, tmp_path):
        (tmp_path / 'bad.toml').write_text('target_zoom = 1\nbase_zoom = 2\n', encoding='utf-8')
        with pytest.raises(ValidationError):
            load_profile('bad', tmp_path)

    @pytest.mark.parametrize('name', ['default', 'scheme'])
    def test_shipped_profiles_are_valid(self, name):
        settings = load_profile(name, REPO_PROFILES)
        assert isinstance(settings, StreamSettings)

    def test_default_profile_matches_defaults(self):
        assert load_profile('default', REPO_PROFILES) == StreamSettings()
