"""CLI tests using Typer's runner and a scripted gateway."""

import json
import logging
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from cli.commands.main import app
from scriptran.core.exceptions import GatewayError
from scriptran.core.pipeline import PipelineConfig, TranslationPipeline
from scriptran.translation.prompts import DETECTION_INSTRUCTION
from scriptran.utils import get_logger

runner = CliRunner()


def echo_model(system_instruction, user_content):
    if system_instruction == DETECTION_INSTRUCTION:
        text = user_content.split("User input:\n", 1)[1]
        return json.dumps({
            "detectedLanguage": "English",
            "languageMismatch": False,
            "suggestedText": "",
            "translatedText": f"[es] {text}",
        }, ensure_ascii=False)
    return user_content


@pytest.fixture
def scripted(gateway):
    """Patch pipeline construction so no provider is contacted."""
    fake = gateway(handler=echo_model)

    def build(config):
        return TranslationPipeline(fake, PipelineConfig.from_dict(config))

    with patch.object(TranslationPipeline, "from_config", side_effect=build):
        yield fake


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch):
    """No provider keys from the environment, and logging reset after each run."""
    for name in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "PROXY_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("cli.commands.main.load_dotenv", lambda: False)
    yield
    get_logger().remove()
    std_logger = logging.getLogger("scriptran")
    std_logger.handlers = []
    std_logger.propagate = True


def test_translate_json_output(scripted):
    result = runner.invoke(app, ["translate", "Hello", "-s", "English", "-t", "Spanish", "--json-output"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["translatedText"] == "[es] Hello"
    assert payload["provider"] == "openai"
    assert scripted.calls[0].model == "gpt-3.5-turbo"


def test_translate_with_provider_and_model(scripted):
    result = runner.invoke(app, ["translate", "Hello", "-p", "anthropic", "-m", "claude-x", "--json-output"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["provider"] == "anthropic"
    assert scripted.calls[0].model == "claude-x"


def test_translate_panel(scripted):
    result = runner.invoke(app, ["translate", "Hello", "-t", "Spanish"])

    assert result.exit_code == 0
    assert "[es] Hello" in result.output


def test_translate_unknown_provider(scripted):
    result = runner.invoke(app, ["translate", "Hello", "-p", "gemini"])

    assert result.exit_code == 1
    assert "Unknown provider" in result.output


def test_translate_gateway_failure(gateway):
    fake = gateway([GatewayError("openai", "401 Unauthorized")])

    with patch.object(TranslationPipeline, "from_config", return_value=TranslationPipeline(fake)):
        result = runner.invoke(app, ["translate", "Hello"])

    assert result.exit_code == 1
    assert "401 Unauthorized" in result.output


def test_json_file_to_output(scripted, tmp_path):
    source = tmp_path / "in.json"
    source.write_text(json.dumps({"a": "Hello", "b": {"c": ["Bye", 3]}}), encoding="utf-8")
    target = tmp_path / "out" / "es.json"

    result = runner.invoke(app, ["json", str(source), "-o", str(target), "-t", "Spanish"])

    assert result.exit_code == 0, result.output
    assert json.loads(target.read_text(encoding="utf-8")) == {"a": "[es] Hello", "b": {"c": ["[es] Bye", 3]}}


def test_json_from_stdin(scripted):
    result = runner.invoke(app, ["json", "-", "-c", "2"], input='["Hello", null]')

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == ["[es] Hello", None]


def test_json_invalid_document_makes_no_calls(scripted, tmp_path):
    source = tmp_path / "bad.json"
    source.write_text('{"a": "Hello",}', encoding="utf-8")

    result = runner.invoke(app, ["json", str(source)])

    assert result.exit_code == 1
    assert "Invalid JSON format" in result.output
    assert scripted.calls == []


def test_json_missing_file(tmp_path):
    result = runner.invoke(app, ["json", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_json_rejects_bad_concurrency(scripted, tmp_path):
    source = tmp_path / "in.json"
    source.write_text('{"a": "Hello"}', encoding="utf-8")

    result = runner.invoke(app, ["json", str(source), "-c", "0"])

    assert result.exit_code == 1
    assert "max_concurrency" in result.output


def test_example_is_valid_json():
    result = runner.invoke(app, ["example"])

    assert result.exit_code == 0
    assert json.loads(result.output)["number"] == 42


def test_languages():
    result = runner.invoke(app, ["languages"])

    assert result.exit_code == 0
    assert "Korean" in result.output


def test_providers_reflect_keys(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    result = runner.invoke(app, ["providers"])

    assert result.exit_code == 0
    assert "Configured" in result.output
    assert "No API key" in result.output
