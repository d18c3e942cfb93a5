from typer.testing import CliRunner

from explorabot.cli import app

runner = CliRunner()


def test_ask_prints_reply():
    result = runner.invoke(app, ["ask", "deploy with docker", "--plain"])

    assert result.exit_code == 0, result.output
    assert "**Deployment Options:**" in result.output


def test_ask_renders_markdown():
    result = runner.invoke(app, ["ask", "asdkjalksdj"])

    assert result.exit_code == 0, result.output
    assert "asdkjalksdj" in result.output


def test_chat_session_commands():
    result = runner.invoke(app, ["chat", "--plain"], input="hello\n/history\n/clear\n/history\n/quit\n")

    assert result.exit_code == 0, result.output
    assert "Welcome to EXPLORABOT" in result.output
    assert "greeting" in result.output
    assert "Conversation cleared" in result.output
    assert "No conversation yet." in result.output
    assert "Goodbye" in result.output


def test_chat_ends_on_eof():
    result = runner.invoke(app, ["chat", "--plain"], input="deploy\n")

    assert result.exit_code == 0, result.output
    assert "Railway" in result.output
    assert "Goodbye" in result.output
