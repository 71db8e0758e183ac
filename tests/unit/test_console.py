import io

import pytest

from llamachat.console import TranscriptPrinter, chat_loop, main
from llamachat.message import assistant_message, user_message
from llamachat.transcript import Transcript

from tests.conftest import text_stream


def test_printer_writes_only_new_text():
    out = io.StringIO()
    printer = TranscriptPrinter(out)
    reply = assistant_message("Hi")
    t = Transcript().append(user_message("Hello"))

    printer(t)
    t = t.append(reply)
    printer(t)
    t = t.replace_last(reply.appended(" there"))
    printer(t)
    printer.end_turn()

    assert out.getvalue() == "Assistant: Hi there\n\n"


def test_printer_separates_error_notice():
    out = io.StringIO()
    printer = TranscriptPrinter(out)
    t = Transcript().append(user_message("Hello")).append(assistant_message("Hal"))
    printer(t)
    printer(t.append(assistant_message("Error")))

    assert out.getvalue() == "Assistant: Hal\nAssistant: Error"


@pytest.mark.asyncio
async def test_chat_loop_runs_until_quit(make_session, mock_provider, capsys):
    mock_provider.responses = [text_stream("Hi", "!")]
    lines = iter(["Hello", "   ", "/quit"])
    out = io.StringIO()

    session = make_session()
    await chat_loop(session, TranscriptPrinter(out), read_line=lambda _prompt: next(lines))

    assert out.getvalue() == "Assistant: Hi!\n\n"
    assert len(mock_provider.call_log) == 1
    assert "Farewell!" in capsys.readouterr().out


def test_main_reports_configuration_error(monkeypatch, capsys, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("INFERENCE_URL", raising=False)
    monkeypatch.delenv("MODEL_ID", raising=False)
    monkeypatch.delenv("LLAMACHAT_DEBUG", raising=False)

    assert main([]) == 2
    assert "INFERENCE_URL" in capsys.readouterr().err
