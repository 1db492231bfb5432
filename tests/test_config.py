import tempfile
import unittest
from pathlib import Path

from datastreams_watch.infra.config import REQUIRED_ENV_VARS, ConfigError, FeedConfig, load_config, require_env

BASE_ENV = {
    "DATASTREAMS_API_KEY": "key",
    "DATASTREAMS_API_SECRET": "secret",
    "DATASTREAMS_REST_URL": "https://api.example.test",
    "DATASTREAMS_WS_URL": "wss://ws.example.test",
    "DATASTREAMS_FEED_ID": "0x0003" + "ab" * 30,
}


class LoadConfigTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.missing_settings = Path(self._tmp.name) / "absent.yaml"

    def test_each_missing_required_variable_is_named(self) -> None:
        for key in REQUIRED_ENV_VARS:
            with self.subTest(key=key):
                env = {k: v for k, v in BASE_ENV.items() if k != key}
                with self.assertRaises(ConfigError) as ctx:
                    load_config(self.missing_settings, environ=env)
                self.assertEqual(f"Missing required environment variable: {key}", str(ctx.exception))

    def test_empty_value_counts_as_missing(self) -> None:
        with self.assertRaisesRegex(ConfigError, "DATASTREAMS_API_SECRET"):
            require_env("DATASTREAMS_API_SECRET", {"DATASTREAMS_API_SECRET": ""})

    def test_loads_required_values_with_defaults(self) -> None:
        config = load_config(self.missing_settings, environ=BASE_ENV)

        self.assertEqual("key", config.credentials.api_key)
        self.assertEqual("wss://ws.example.test", config.endpoints.ws_url)
        self.assertIsNone(config.feed.feed_name)
        self.assertEqual(BASE_ENV["DATASTREAMS_FEED_ID"], config.feed.display_name)
        self.assertEqual(1e18, config.display.price_scale)
        self.assertEqual(2, config.display.price_decimals)
        self.assertTrue(config.display.show_fields)
        self.assertEqual("INFO", config.logging.level)

    def test_feed_name_is_optional(self) -> None:
        config = load_config(self.missing_settings, environ={**BASE_ENV, "DATASTREAMS_FEED_NAME": "ETH/USD"})

        self.assertEqual("ETH/USD", config.feed.feed_name)
        self.assertEqual(f"ETH/USD ({BASE_ENV['DATASTREAMS_FEED_ID']})", config.feed.display_name)

    def test_yaml_settings_and_env_overrides(self) -> None:
        settings = Path(self._tmp.name) / "settings.yaml"
        settings.write_text(
            "display:\n  price_scale: 1.0e8\n  price_decimals: 4\n  show_fields: false\n"
            "logging:\n  level: DEBUG\n  format: text\n",
            encoding="utf-8",
        )

        config = load_config(settings, environ={**BASE_ENV, "LOG_LEVEL": "WARNING"})

        self.assertEqual(1e8, config.display.price_scale)
        self.assertEqual(4, config.display.price_decimals)
        self.assertFalse(config.display.show_fields)
        self.assertEqual("WARNING", config.logging.level)
        self.assertEqual("text", config.logging.format)

    def test_settings_path_from_environment(self) -> None:
        settings = Path(self._tmp.name) / "custom.yaml"
        settings.write_text("display:\n  price_decimals: 3\n", encoding="utf-8")

        config = load_config(environ={**BASE_ENV, "CONFIG_PATH": str(settings)})

        self.assertEqual(3, config.display.price_decimals)

    def test_non_mapping_settings_rejected(self) -> None:
        settings = Path(self._tmp.name) / "list.yaml"
        settings.write_text("- a\n- b\n", encoding="utf-8")

        with self.assertRaises(ConfigError):
            load_config(settings, environ=BASE_ENV)

    def test_non_mapping_section_rejected(self) -> None:
        for section in ("display", "logging"):
            with self.subTest(section=section):
                settings = Path(self._tmp.name) / f"{section}.yaml"
                settings.write_text(f"{section}: 5\n", encoding="utf-8")

                with self.assertRaisesRegex(ConfigError, f"Section '{section}'"):
                    load_config(settings, environ=BASE_ENV)

    def test_non_positive_price_scale_rejected(self) -> None:
        for value in ("0", "-1.0e18", ".inf"):
            with self.subTest(price_scale=value):
                settings = Path(self._tmp.name) / "scale.yaml"
                settings.write_text(f"display:\n  price_scale: {value}\n", encoding="utf-8")

                with self.assertRaisesRegex(ConfigError, "price_scale"):
                    load_config(settings, environ=BASE_ENV)

    def test_negative_price_decimals_rejected(self) -> None:
        settings = Path(self._tmp.name) / "decimals.yaml"
        settings.write_text("display:\n  price_decimals: -1\n", encoding="utf-8")

        with self.assertRaisesRegex(ConfigError, "price_decimals"):
            load_config(settings, environ=BASE_ENV)

    def test_zero_price_decimals_allowed(self) -> None:
        settings = Path(self._tmp.name) / "decimals.yaml"
        settings.write_text("display:\n  price_decimals: 0\n", encoding="utf-8")

        self.assertEqual(0, load_config(settings, environ=BASE_ENV).display.price_decimals)

    def test_missing_credentials_checked_before_settings(self) -> None:
        settings = Path(self._tmp.name) / "list.yaml"
        settings.write_text("- a\n", encoding="utf-8")

        with self.assertRaisesRegex(ConfigError, "DATASTREAMS_API_KEY"):
            load_config(settings, environ={})


class FeedConfigTest(unittest.TestCase):
    def test_display_name_without_name(self) -> None:
        self.assertEqual("0xabc", FeedConfig(feed_id="0xabc").display_name)


if __name__ == "__main__":
    unittest.main()
