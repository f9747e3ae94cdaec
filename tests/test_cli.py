"""Tests for the backlog CLI commands."""

import os
from pathlib import Path

from conftest import strip_ansi
from typer.testing import CliRunner

from backlog import __version__
from backlog.cli import app
from backlog.utils.markdown import parse_milestone_markdown, parse_task_markdown


def invoke(runner: CliRunner, project: Path, *args: str):
    """Run a command against a project root."""
    return runner.invoke(app, [*args, "--root", str(project)])


class TestCliBasics:
    """Tests for top-level CLI behaviour."""

    def test_version(self, runner: CliRunner) -> None:
        """Test that --version prints the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        """Test that every command is registered."""
        result = runner.invoke(app, ["--help"])
        output = strip_ansi(result.output)

        assert result.exit_code == 0
        for name in ("init", "list", "board", "show", "create", "edit", "archive", "restore", "delete", "milestones"):
            assert name in output

    def test_not_a_project(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that commands fail outside a project."""
        result = invoke(runner, tmp_path, "list")

        assert result.exit_code == 1
        assert "backlog init" in strip_ansi(result.output)


class TestInitCommand:
    """Tests for the init command."""

    def test_creates_project(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that init writes config and directories."""
        result = runner.invoke(app, ["init", "--root", str(tmp_path), "--name", "Demo", "--statuses", "Open, Closed"])

        assert result.exit_code == 0
        config = (tmp_path / "backlog" / "config.yml").read_text()
        assert 'project_name: "Demo"' in config
        assert 'statuses: ["Open", "Closed"]' in config
        assert (tmp_path / "backlog" / "tasks").is_dir()
        assert (tmp_path / "backlog" / "completed").is_dir()
        assert (tmp_path / "backlog" / "milestones").is_dir()

    def test_defaults_to_cwd(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that init uses the current directory and its name."""
        original_cwd = os.getcwd()
        try:
            os.chdir(tmp_path)
            result = runner.invoke(app, ["init"])
        finally:
            os.chdir(original_cwd)

        assert result.exit_code == 0
        config = (tmp_path / "backlog" / "config.yml").read_text()
        assert f'project_name: "{tmp_path.name}"' in config

    def test_existing_project(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test that init leaves an existing config alone."""
        before = (backlog_project / "backlog" / "config.yml").read_text()

        result = runner.invoke(app, ["init", "--root", str(backlog_project)])

        assert result.exit_code == 0
        assert "already exists" in strip_ansi(result.output)
        assert (backlog_project / "backlog" / "config.yml").read_text() == before


class TestTaskCommands:
    """Tests for task commands against a project on disk."""

    def test_create_and_show(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test creating a task and showing it."""
        result = invoke(
            runner, backlog_project, "create", "First task", "-d", "Some details", "-l", "ui", "-p", "high", "--ac", "It works"
        )
        assert result.exit_code == 0
        assert "Created task 1" in strip_ansi(result.output)

        path = backlog_project / "backlog" / "tasks" / "1 - First task.md"
        task = parse_task_markdown(path.read_text(), str(path))
        assert task.labels == ["ui"]
        assert task.priority == "high"
        assert task.acceptance_criteria_items[0].text == "It works"

        result = invoke(runner, backlog_project, "show", "1")
        output = strip_ansi(result.output)
        assert result.exit_code == 0
        assert "First task" in output
        assert "Some details" in output

    def test_create_rejects_bad_priority(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test that an unknown priority is an error."""
        result = invoke(runner, backlog_project, "create", "X", "-p", "urgent")

        assert result.exit_code == 1
        assert not list((backlog_project / "backlog" / "tasks").iterdir())

    def test_list_and_filter(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test listing tasks with a status filter."""
        invoke(runner, backlog_project, "create", "Alpha")
        invoke(runner, backlog_project, "create", "Bravo", "-s", "Done")

        result = invoke(runner, backlog_project, "list")
        output = strip_ansi(result.output)
        assert result.exit_code == 0
        assert "Alpha" in output
        assert "Bravo" in output

        result = invoke(runner, backlog_project, "list", "-s", "Done")
        output = strip_ansi(result.output)
        assert "Bravo" in output
        assert "Alpha" not in output

    def test_list_empty(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test listing an empty project."""
        result = invoke(runner, backlog_project, "list")

        assert result.exit_code == 0
        assert "No tasks found" in strip_ansi(result.output)

    def test_edit(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test editing status, title and labels."""
        invoke(runner, backlog_project, "create", "Old title", "-l", "a")

        result = invoke(
            runner, backlog_project, "edit", "1", "-t", "New title", "-s", "In Progress", "--add-label", "b", "--remove-label", "a"
        )

        assert result.exit_code == 0
        tasks_dir = backlog_project / "backlog" / "tasks"
        assert not (tasks_dir / "1 - Old title.md").exists()
        path = tasks_dir / "1 - New title.md"
        task = parse_task_markdown(path.read_text(), str(path))
        assert task.status == "In Progress"
        assert task.labels == ["b"]

    def test_edit_unknown(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test that editing a missing task fails."""
        result = invoke(runner, backlog_project, "edit", "42", "-s", "Done")

        assert result.exit_code == 1
        assert "not found" in strip_ansi(result.output)

    def test_archive_and_restore(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test moving a task to completed/ and back."""
        invoke(runner, backlog_project, "create", "Movable")
        active = backlog_project / "backlog" / "tasks" / "1 - Movable.md"
        done = backlog_project / "backlog" / "completed" / "1 - Movable.md"

        result = invoke(runner, backlog_project, "archive", "1")
        assert result.exit_code == 0
        assert done.exists() and not active.exists()

        result = invoke(runner, backlog_project, "archive", "1")
        assert result.exit_code == 1

        result = invoke(runner, backlog_project, "restore", "1")
        assert result.exit_code == 0
        assert active.exists() and not done.exists()

    def test_delete(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test deleting with and without confirmation."""
        invoke(runner, backlog_project, "create", "Doomed")
        path = backlog_project / "backlog" / "tasks" / "1 - Doomed.md"

        result = runner.invoke(app, ["delete", "1", "--root", str(backlog_project)], input="n\n")
        assert result.exit_code == 0
        assert path.exists()

        result = invoke(runner, backlog_project, "delete", "1", "--yes")
        assert result.exit_code == 0
        assert not path.exists()

        result = invoke(runner, backlog_project, "delete", "1", "--yes")
        assert result.exit_code == 1

    def test_board(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test that the board shows every status column."""
        invoke(runner, backlog_project, "create", "Card")

        result = invoke(runner, backlog_project, "board")
        output = strip_ansi(result.output)

        assert result.exit_code == 0
        assert "To Do (1)" in output
        assert "Done (0)" in output


class TestMilestoneCommands:
    """Tests for milestone commands."""

    def test_create_and_summarize(self, runner: CliRunner, backlog_project: Path) -> None:
        """Test creating a milestone, assigning a task and viewing progress."""
        result = invoke(runner, backlog_project, "milestone-create", "Alpha", "-d", "First cut")
        assert result.exit_code == 0
        assert "m-0" in strip_ansi(result.output)

        invoke(runner, backlog_project, "create", "Scoped", "-m", "m-0", "-s", "Done")

        path = backlog_project / "backlog" / "milestones" / "m-0 - alpha.md"
        assert parse_milestone_markdown(path.read_text()).tasks == ["1"]

        result = invoke(runner, backlog_project, "milestones")
        output = strip_ansi(result.output)
        assert result.exit_code == 0
        assert "Alpha" in output
        assert "100%" in output
