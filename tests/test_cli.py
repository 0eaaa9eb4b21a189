import pytest

import comgen.cli as cli_module
from comgen.config import Config
from comgen.core import WorkflowResult
from comgen.exceptions import (
    ConfigError,
    OperatorAbort,
    TransportError,
    WorkflowError,
)
from conftest import FakeBackend, modified


class _FakeWorkflow:
    instances: list = []

    def __init__(self, git_repo, backend, display, options, logger=None):
        self.git_repo = git_repo
        self.backend = backend
        self.display = display
        self.options = options
        self.ran_with = None
        _FakeWorkflow.instances.append(self)

    def list_changes(self):
        return [modified("a.txt")]

    def run(self, entries=None):
        self.ran_with = entries
        return WorkflowResult(committed=["a.txt"])


@pytest.fixture
def wired(monkeypatch):
    """Patch config loading, backend creation and the workflow class."""
    _FakeWorkflow.instances = []
    loaded = {}

    def fake_load_config(path):
        loaded["path"] = path
        return Config(provider="ollama", model="llama3")

    monkeypatch.setattr(cli_module, "load_config", fake_load_config)
    monkeypatch.setattr(cli_module, "create_backend", lambda config: FakeBackend())
    monkeypatch.setattr(cli_module, "FileWorkflow", _FakeWorkflow)
    return loaded


def test_cli_help_returns_zero():
    assert cli_module.CLI().run(["--help"]) == 0


def test_cli_version_returns_zero(capsys):
    assert cli_module.CLI().run(["--version"]) == 0
    assert "comgen" in capsys.readouterr().out


def test_cli_rejects_unknown_audit_level():
    assert cli_module.CLI().run(["--audit-level", "SEVERE"]) == 2


def test_cli_parser_defaults():
    parsed = cli_module.build_parser().parse_args([])
    assert parsed.audit_level == "MEDIUM"
    assert parsed.audit is True
    assert parsed.force is False
    assert parsed.auto_push is False
    assert parsed.prefix == ""


def test_cli_executes_workflow_success(wired, git_repo, capsys):
    args = [
        "--config",
        "/etc/comgen.yaml",
        "--repo-path",
        str(git_repo),
        "-p",
        "JIRA-1",
        "-a",
        "--audit-level",
        "high",
        "--no-progress",
    ]
    assert cli_module.CLI().run(args) == 0

    assert wired["path"] == "/etc/comgen.yaml"
    workflow = _FakeWorkflow.instances[0]
    assert workflow.options.prefix == "JIRA-1"
    assert workflow.options.auto_push is True
    assert workflow.display.audit_level == "HIGH"
    assert workflow.ran_with == [modified("a.txt")]
    out = capsys.readouterr().out
    assert "Modified Files" in out
    assert "Committed 1 file(s)" in out


def test_cli_model_override_applies(wired, git_repo, monkeypatch):
    seen = {}

    def fake_create_backend(config):
        seen["model"] = config.model
        return FakeBackend()

    monkeypatch.setattr(cli_module, "create_backend", fake_create_backend)
    args = ["--repo-path", str(git_repo), "--model", "mistral", "--no-progress"]
    assert cli_module.CLI().run(args) == 0
    assert seen["model"] == "mistral"


def test_cli_loads_local_template(wired, git_repo):
    (git_repo / "comgen.template").write_text(
        "commit_types: [chore]\noutput_format:\n  max_length: 50\n"
    )
    assert cli_module.CLI().run(["--repo-path", str(git_repo), "--no-progress"]) == 0
    template = _FakeWorkflow.instances[0].options.template
    assert template.allowed_categories == ("chore",)
    assert template.max_length == 50


def test_cli_not_a_repository(wired, tmp_path, capsys):
    plain = tmp_path / "plain"
    plain.mkdir()
    assert cli_module.CLI().run(["--repo-path", str(plain)]) == 1
    assert "Not a Git repository" in capsys.readouterr().err


def test_cli_missing_config_file(tmp_path, capsys):
    rc = cli_module.CLI().run(["--config", str(tmp_path / "missing.yaml")])
    assert rc == 1
    assert "Config file not found" in capsys.readouterr().err


def test_cli_config_error(monkeypatch, capsys):
    def boom(path):
        raise ConfigError("OpenAI API key is required when using OpenAI provider")

    monkeypatch.setattr(cli_module, "load_config", boom)
    assert cli_module.CLI().run([]) == 1
    assert "OpenAI API key is required" in capsys.readouterr().err


def test_cli_handles_workflow_failure(wired, git_repo, monkeypatch, capsys):
    def failing_run(self, entries=None):
        raise WorkflowError(TransportError("refused", "ollama"), "generate", "a.txt")

    monkeypatch.setattr(_FakeWorkflow, "run", failing_run)
    assert cli_module.CLI().run(["--repo-path", str(git_repo)]) == 1
    assert "generate failed for a.txt: ollama: refused" in capsys.readouterr().err


def test_cli_operator_abort_exit_code(wired, git_repo, monkeypatch):
    def aborted_run(self, entries=None):
        raise WorkflowError(OperatorAbort("interrupted at prompt"), "generate", "a.txt")

    monkeypatch.setattr(_FakeWorkflow, "run", aborted_run)
    assert cli_module.CLI().run(["--repo-path", str(git_repo)]) == 130


def test_cli_writes_log_file(wired, git_repo, tmp_path):
    assert cli_module.CLI().run(["--repo-path", str(git_repo), "--no-progress"]) == 0
    log_file = tmp_path / ".comgen-home" / "comgen.log"
    assert "using provider: ollama" in log_file.read_text()


def test_cli_provider_flag_overrides_invalid_file_provider(
    git_repo, tmp_path, monkeypatch
):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("provider: openai\n")
    seen = {}

    def fake_create_backend(config):
        seen["provider"] = config.provider
        seen["model"] = config.model
        return FakeBackend()

    monkeypatch.setattr(cli_module, "create_backend", fake_create_backend)
    monkeypatch.setattr(cli_module, "FileWorkflow", _FakeWorkflow)
    args = [
        "--config",
        str(config_path),
        "--provider",
        "ollama",
        "--repo-path",
        str(git_repo),
        "--no-progress",
    ]
    assert cli_module.CLI().run(args) == 0
    assert seen == {"provider": "ollama", "model": "llama3"}


def test_cli_validates_final_config(git_repo, tmp_path, capsys):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("provider: ollama\n")
    args = [
        "--config",
        str(config_path),
        "--provider",
        "openai",
        "--repo-path",
        str(git_repo),
    ]
    assert cli_module.CLI().run(args) == 1
    assert "OpenAI API key is required" in capsys.readouterr().err
