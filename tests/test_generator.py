"""Unit tests for levels and the level generator."""

import json
import os

import pytest
from vialsort.generator import Level, LevelGenerator, load_levels, save_levels


class TestLevel:
    """Tests for Level."""

    def test_from_string(self):
        """Test parsing with an empty segment."""
        level = Level.from_string("0/0/", vial_height=2, empty_vials=0)
        assert level.raw_vials == [[0], [0], []]
        assert level.num_colors == 1
        assert level.params.empty_vials == 2
        assert level.to_state().to_raw_vials() == [[0], [0], []]

    def test_empty_vials_are_added(self):
        """Test extra empty vials are appended to the state."""
        level = Level([[0, 1], [1, 0]], vial_height=2, empty_vials=2)
        state = level.to_state()
        assert state.to_raw_vials() == [[0, 1], [1, 0], [], []]
        assert state.params.num_vials == 4

    def test_overfull_vial(self):
        """Test a vial taller than the vial height is rejected."""
        level = Level([[0, 0, 0]], vial_height=2)
        with pytest.raises(ValueError, match="exceeds maximum vial height"):
            level.to_state()

    def test_unbalanced_colors(self):
        """Test a level whose colors do not fill whole vials is rejected."""
        level = Level([[0, 0], [0, 0]], vial_height=2, empty_vials=1)
        with pytest.raises(ValueError, match="appears 4 times"):
            level.to_state()

    def test_to_string(self):
        """Test a level serializes back to its string form."""
        assert Level.from_string("8,5,0,5/1,0,2,3").to_string() == "8,5,0,5/1,0,2,3"

    def test_dict_round_trip(self):
        """Test unknown keys survive a dict round trip."""
        level = Level([[0, 1], [1, 0]], vial_height=2, empty_vials=1, name="tiny",
                      extra={"author": "me"})
        data = level.to_dict()
        assert data["author"] == "me"
        assert Level.from_dict(data) == level

    def test_save_and_load(self, tmp_path):
        """Test saving and loading a list of levels."""
        levels = LevelGenerator(vial_height=3, seed=1).generate_batch(3, 2)
        path = os.path.join(tmp_path, "levels.json")
        save_levels(levels, path)
        assert load_levels(path) == levels

    def test_load_single_level(self, tmp_path):
        """Test a file holding one level object."""
        path = os.path.join(tmp_path, "level.json")
        with open(path, "w") as f:
            json.dump({"raw_vials": [[0], [0]], "vial_height": 2, "empty_vials": 1}, f)
        levels = load_levels(path)
        assert len(levels) == 1
        assert levels[0].to_state().to_raw_vials() == [[0], [0], []]


class TestLevelGenerator:
    """Tests for LevelGenerator."""

    def test_generate_shape(self):
        """Test generated levels hold every color exactly vial_height times."""
        generator = LevelGenerator(vial_height=4, empty_vials=2, seed=42)
        level = generator.generate(5)
        state = level.to_state()

        assert len(state.vials) == 7
        assert all(vial.height == 4 for vial in state.vials[:5])
        assert all(vial.is_empty() for vial in state.vials[5:])
        assert dict(state.item_counts()) == {color: 4 for color in range(5)}
        assert state.params.num_colors == 5
        assert state.params.empty_vials == 2

    def test_seed_is_reproducible(self):
        """Test the same seed generates the same levels."""
        a = LevelGenerator(seed=3).generate_batch(4, 3)
        b = LevelGenerator(seed=3).generate_batch(4, 3)
        assert a == b

    def test_invalid_color_count(self):
        """Test color counts outside the supported range are rejected."""
        generator = LevelGenerator()
        with pytest.raises(ValueError):
            generator.generate(0)
        with pytest.raises(ValueError):
            generator.generate(LevelGenerator.MAX_COLORS + 1)

    def test_invalid_parameters(self):
        """Test bad generator parameters are rejected."""
        with pytest.raises(ValueError):
            LevelGenerator(vial_height=0)
        with pytest.raises(ValueError):
            LevelGenerator(empty_vials=-1)

    def test_generate_batch(self):
        """Test batch generation."""
        levels = LevelGenerator(seed=42).generate_batch(3, 4)
        assert len(levels) == 3
        assert all(level.num_colors == 4 for level in levels)

    def test_save_to_folder(self, tmp_path):
        """Test saving one JSON file per level."""
        levels = LevelGenerator(seed=42).generate_batch(2, 3)
        LevelGenerator.save_to_folder(levels, str(tmp_path), prefix="easy")
        assert sorted(os.listdir(tmp_path)) == ["easy_1.json", "easy_2.json"]
        assert load_levels(os.path.join(tmp_path, "easy_1.json")) == [levels[0]]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
