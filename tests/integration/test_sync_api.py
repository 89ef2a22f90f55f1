"""Repeated sync calls through a real OpenAI backend against a local server."""

import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from scriptran.core.models import Provider, TranslationUnit
from scriptran.core.pipeline import TranslationPipeline
from scriptran.translation.backends import OpenAIBackend
from scriptran.translation.gateway import ProviderGateway
from scriptran.translation.prompts import DETECTION_INSTRUCTION

TRANSLATIONS = {"Hello": "Hola", "Bye": "Adiós"}


class ChatCompletionsHandler(BaseHTTPRequestHandler):
    """Answers chat completions; keeps connections alive so clients pool them."""

    protocol_version = "HTTP/1.1"

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        body = json.loads(self.rfile.read(length))
        messages = body["messages"]
        user_content = messages[-1]["content"]

        if messages[0]["content"] == DETECTION_INSTRUCTION:
            text = user_content.split("User input:\n", 1)[1]
            content = json.dumps({
                "detectedLanguage": "English",
                "languageMismatch": False,
                "suggestedText": "",
                "translatedText": TRANSLATIONS[text],
            }, ensure_ascii=False)
        else:
            content = user_content

        payload = json.dumps({
            "id": "chatcmpl-local",
            "object": "chat.completion",
            "created": 0,
            "model": body["model"],
            "choices": [{
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }],
            "usage": {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2},
        }, ensure_ascii=False).encode("utf-8")

        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def local_server(monkeypatch):
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")
    server = ThreadingHTTPServer(("127.0.0.1", 0), ChatCompletionsHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}/v1"
    server.shutdown()
    server.server_close()


@pytest.fixture
def pipeline(local_server):
    backend = OpenAIBackend(api_key="sk-local", base_url=local_server, timeout=10.0, max_retries=0)
    return TranslationPipeline(ProviderGateway({Provider.OPENAI: backend}))


def test_translate_text_repeatedly(pipeline):
    unit = TranslationUnit(
        text="Hello",
        source_lang="English",
        target_lang="Spanish",
        provider=Provider.OPENAI,
        model="gpt-3.5-turbo",
    )

    results = [pipeline.translate_text(unit).translated_text for _ in range(3)]

    assert results == ["Hola", "Hola", "Hola"]


def test_text_then_json_on_one_pipeline(pipeline):
    unit = TranslationUnit(
        text="Hello",
        source_lang="English",
        target_lang="Spanish",
        provider=Provider.OPENAI,
        model="gpt-3.5-turbo",
    )

    assert pipeline.translate_text(unit).translated_text == "Hola"
    assert pipeline.translate_json(
        {"a": "Hello", "b": {"c": ["Bye"]}}, "English", "Spanish", "openai"
    ) == {"a": "Hola", "b": {"c": ["Adiós"]}}
