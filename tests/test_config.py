from h_cli.core.config import (
    DEFAULT_DATA_DIR,
    data_dir,
    ensure_data_dir,
    load_preamble,
    resolve_api_key,
)

from .test_base import BaseHTest


class TestConfig(BaseHTest):
    def test_environment_key_wins(self):
        (self.data_dir / "openai_key").write_text("sk-file")
        key = resolve_api_key(self.data_dir, {"OPENAI_API_KEY": "sk-env"})
        self.assertEqual(key, "sk-env")

    def test_key_file_fallback_is_trimmed(self):
        (self.data_dir / "openai_key").write_text("  sk-file\n")
        self.assertEqual(resolve_api_key(self.data_dir, {}), "sk-file")

    def test_blank_sources_give_no_key(self):
        (self.data_dir / "openai_key").write_text("\n")
        self.assertIsNone(resolve_api_key(self.data_dir, {"OPENAI_API_KEY": "  "}))

    def test_no_sources_give_no_key(self):
        self.assertIsNone(resolve_api_key(self.data_dir, {}))

    def test_data_dir_override(self):
        self.assertEqual(data_dir({"H_DATA_DIR": str(self.data_dir)}), self.data_dir)
        self.assertEqual(data_dir({}), DEFAULT_DATA_DIR)

    def test_ensure_data_dir_is_repeatable(self):
        target = self.data_dir / "fresh"
        ensure_data_dir(target)
        ensure_data_dir(target)
        self.assertTrue(target.is_dir())

    def test_preamble_mentions_stop_marker(self):
        self.assertIn("END_OF_MESSAGE", load_preamble())
