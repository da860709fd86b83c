"""Tests for data models, configuration and small input helpers."""

from __future__ import annotations

import os
import re
import unittest
from pathlib import Path
from unittest import mock

from pydantic import ValidationError

from engine.schemas import ResumeDetails, SwotText
from engine.settings import DEFAULT_MODEL, AppSettings, resolve_api_key
from engine.utils import (
    extract_first_json_object,
    missing_swot_fields,
    normalize_inputs_for_cache_key,
    sanitize_text,
)


class SchemaTests(unittest.TestCase):
    def test_swot_rejects_blank_fields(self) -> None:
        with self.assertRaises(ValidationError):
            SwotText(strengths="Python", weaknesses="   ", opportunities="Cloud", threats="AI")

    def test_swot_is_immutable(self) -> None:
        swot = SwotText(strengths="Python", weaknesses="Public speaking", opportunities="Cloud", threats="AI")
        with self.assertRaises(ValidationError):
            swot.strengths = "changed"

    def test_resume_details_normalization(self) -> None:
        details = ResumeDetails(name="  Jane Doe ", email=" jane@example.com ", experience="  ")
        self.assertEqual(details.name, "Jane Doe")
        self.assertEqual(details.email, "jane@example.com")
        self.assertIsNone(details.experience)

    def test_resume_details_require_valid_email(self) -> None:
        for bad in ("jane", "jane@localhost", "@example.com", "jane doe@example.com"):
            with self.assertRaises(ValidationError, msg=bad):
                ResumeDetails(name="Jane", email=bad)


class SettingsTests(unittest.TestCase):
    def test_defaults_from_empty_environment(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = AppSettings.from_env()
        self.assertEqual(settings.api_key, "")
        self.assertEqual(settings.model, DEFAULT_MODEL)
        self.assertEqual(settings.smtp_port, 587)
        self.assertEqual(settings.log_level, "INFO")

    def test_environment_overrides(self) -> None:
        env = {
            "GOOGLE_API_KEY": "google-key",
            "GEMINI_MODEL": "gemini-2.5-pro",
            "SMTP_PORT": "not-a-number",
            "SMTP_USER": "me@example.com",
            "LOG_LEVEL": "debug",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = AppSettings.from_env()
        self.assertEqual(settings.api_key, "google-key")
        self.assertEqual(settings.model, "gemini-2.5-pro")
        self.assertEqual(settings.smtp_port, 587)
        self.assertEqual(settings.smtp_sender, "me@example.com")
        self.assertEqual(settings.log_level, "DEBUG")

    def test_sidebar_key_wins(self) -> None:
        settings = AppSettings(api_key="env-key")
        self.assertEqual(resolve_api_key(" sidebar ", settings), "sidebar")
        self.assertEqual(resolve_api_key("", settings), "env-key")


class UtilsTests(unittest.TestCase):
    def test_missing_swot_fields(self) -> None:
        form = {"strengths": "Python", "weaknesses": " ", "threats": "AI"}
        self.assertEqual(missing_swot_fields(form), ["weaknesses", "opportunities"])

    def test_sanitize_text(self) -> None:
        self.assertEqual(sanitize_text("  <i>hi</i>\x07 there ", 100), "hi there")
        self.assertEqual(sanitize_text("abcdef", 3), "abc…")
        self.assertEqual(sanitize_text(None, 10), "")

    def test_cache_key_is_normalized(self) -> None:
        a = normalize_inputs_for_cache_key({"strengths": "Python  Expert", "model": "m", "api_key": "secret"})
        b = normalize_inputs_for_cache_key({"strengths": "python expert", "model": "M"})
        self.assertEqual(a, b)
        self.assertNotIn("api_key", a)

    def test_extract_first_json_object(self) -> None:
        text = 'Sure! ```json\n{"subject": "Hi {there}", "body": "x"}\n``` done {"other": 1}'
        self.assertEqual(extract_first_json_object(text), '{"subject": "Hi {there}", "body": "x"}')
        with self.assertRaises(ValueError):
            extract_first_json_object("no json here")


class LoggerNamingTests(unittest.TestCase):
    SRC = Path(__file__).resolve().parents[1] / "src"

    def test_modules_name_loggers_after_themselves(self) -> None:
        for path in sorted(self.SRC.rglob("*.py")):
            for name in re.findall(r"logging\.getLogger\((.*?)\)", path.read_text(encoding="utf-8")):
                self.assertEqual(name, "__name__", path.name)


if __name__ == "__main__":
    unittest.main()
