"""Tests for install, update, remove, list and verify commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from agpm.cli.cli import cli
from agpm.config.io import load_config, load_lock, save_config
from agpm.config.models import AgpmConfig
from agpm.context import AgpmContext
from agpm.errors import CheckoutError
from agpm.gateway.git.fake import FakeGit, FakeRemoteRepo

URL = "https://github.com/owner/repo.git"
SHA_1 = "1" * 40
SHA_2 = "2" * 40


def _tree(pdf_body: str) -> dict[str, str]:
    marketplace = {"plugins": [{"name": "core", "skills": ["skills/pdf", "skills/xlsx"]}]}
    return {
        ".claude-plugin/marketplace.json": json.dumps(marketplace),
        "skills/pdf/SKILL.md": f"---\nname: pdf\ndescription: Work with PDFs\n---\n{pdf_body}\n",
        "skills/xlsx/SKILL.md": "---\nname: xlsx\n---\n",
    }


@pytest.fixture
def remote() -> FakeRemoteRepo:
    return FakeRemoteRepo(refs={"HEAD": SHA_1, "main": SHA_1}, commits={SHA_1: _tree("v1")})


@pytest.fixture
def git(remote: FakeRemoteRepo) -> FakeGit:
    return FakeGit(remotes={URL: remote})


@pytest.fixture
def ctx(git: FakeGit, project_dir: Path, agpm_home: Path) -> AgpmContext:
    return AgpmContext.for_test(git=git, cwd=project_dir, agpm_home=agpm_home)


def _declare(
    project_dir: Path,
    *,
    artifacts: list[str] | None = None,
    collections: list[str] | None = None,
    targets: dict[str, object] | None = None,
) -> None:
    save_config(
        project_dir,
        AgpmConfig(
            targets=targets if targets is not None else {"claude-code": True},
            artifacts=artifacts or [],
            collections=collections or [],
        ),
    )


def _push(remote: FakeRemoteRepo, sha: str, pdf_body: str) -> None:
    remote.commits[sha] = _tree(pdf_body)
    remote.refs["HEAD"] = sha
    remote.refs["main"] = sha


class TestInstall:
    def test_nothing_declared(self, cli_runner: CliRunner, ctx: AgpmContext) -> None:
        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "No artifacts or collections configured." in result.output

    def test_installs_and_locks(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])

        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "Installed: .claude/skills/pdf" in result.output
        skill = project_dir / ".claude" / "skills" / "pdf" / "SKILL.md"
        assert "v1" in skill.read_text(encoding="utf-8")

        entry = load_lock(project_dir).get("owner/repo/pdf")
        assert entry is not None
        assert entry.sha == SHA_1
        assert entry.path == "skills/pdf"
        assert entry.integrity.startswith("sha256-")

    def test_second_install_uses_lock_without_git(
        self, cli_runner: CliRunner, ctx: AgpmContext, git: FakeGit, project_dir: Path
    ) -> None:
        """A locked, cached artifact installs without fetching or checking out."""
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        cli_runner.invoke(cli, ["install"], obj=ctx)
        lock_text = (project_dir / "agpm.lock").read_text(encoding="utf-8")
        checkouts_before = len(git.checkouts)

        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "locked 1111111" in result.output
        assert git.fetched == []
        assert len(git.checkouts) == checkouts_before
        assert (project_dir / "agpm.lock").read_text(encoding="utf-8") == lock_text

    def test_locked_commit_wins_over_remote(
        self,
        cli_runner: CliRunner,
        ctx: AgpmContext,
        remote: FakeRemoteRepo,
        project_dir: Path,
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        cli_runner.invoke(cli, ["install"], obj=ctx)
        _push(remote, SHA_2, "v2")

        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 0, result.output
        skill = project_dir / ".claude" / "skills" / "pdf" / "SKILL.md"
        assert "v1" in skill.read_text(encoding="utf-8")

    def test_force_re_resolves(
        self,
        cli_runner: CliRunner,
        ctx: AgpmContext,
        remote: FakeRemoteRepo,
        project_dir: Path,
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        cli_runner.invoke(cli, ["install"], obj=ctx)
        _push(remote, SHA_2, "v2")

        result = cli_runner.invoke(cli, ["install", "--force"], obj=ctx)

        assert result.exit_code == 0, result.output
        entry = load_lock(project_dir).get("owner/repo/pdf")
        assert entry is not None
        assert entry.sha == SHA_2
        skill = project_dir / ".claude" / "skills" / "pdf" / "SKILL.md"
        assert "v2" in skill.read_text(encoding="utf-8")

    def test_partial_failure_keeps_successes(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf", "owner/repo/missing"])

        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 1
        assert "owner/repo/missing" in result.output
        assert "not found" in result.output
        lock = load_lock(project_dir)
        assert list(lock.artifacts) == ["owner/repo/pdf"]
        assert (project_dir / ".claude" / "skills" / "pdf").is_dir()

    def test_unreachable_repository_fails(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["nobody/nothing/pdf"])

        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 1
        assert "Repository unavailable" in result.output
        assert not (project_dir / "agpm.lock").exists()

    def test_checkout_failure_reported_without_traceback(
        self, cli_runner: CliRunner, remote: FakeRemoteRepo, project_dir: Path, agpm_home: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        failing = FakeGit(
            remotes={URL: remote},
            checkout_raises=CheckoutError(agpm_home / "repos", SHA_1, "disk full"),
        )
        ctx = AgpmContext.for_test(git=failing, cwd=project_dir, agpm_home=agpm_home)

        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Checkout of 1111111111111111111111111111111111111111 failed" in result.output
        assert not (project_dir / "agpm.lock").exists()

    def test_collection_installs_members(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, collections=["owner/repo/core"])

        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert (project_dir / ".claude" / "skills" / "pdf").is_dir()
        assert (project_dir / ".claude" / "skills" / "xlsx").is_dir()
        assert sorted(load_lock(project_dir).artifacts) == ["owner/repo/pdf", "owner/repo/xlsx"]

    def test_pinned_collection_warns(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, collections=["owner/repo/core@v1"])

        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "Warning: " in result.output
        assert "collections can't be pinned" in result.output

    def test_installs_into_every_enabled_target(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(
            project_dir,
            artifacts=["owner/repo/pdf"],
            targets={"claude-code": True, "opencode": True, "codex": False},
        )

        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert (project_dir / ".claude" / "skills" / "pdf").is_dir()
        assert (project_dir / ".opencode" / "skills" / "pdf").is_dir()
        assert not (project_dir / ".codex").exists()

    def test_invalid_lock_reported(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        (project_dir / "agpm.lock").write_text("version = 7\n", encoding="utf-8")

        result = cli_runner.invoke(cli, ["install"], obj=ctx)

        assert result.exit_code == 1
        assert "Invalid agpm.lock" in result.output


class TestUpdate:
    def test_moves_to_latest_commit(
        self,
        cli_runner: CliRunner,
        ctx: AgpmContext,
        remote: FakeRemoteRepo,
        project_dir: Path,
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        cli_runner.invoke(cli, ["install"], obj=ctx)
        _push(remote, SHA_2, "v2")

        result = cli_runner.invoke(cli, ["update"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "owner/repo/pdf: 1111111 -> 2222222" in result.output
        entry = load_lock(project_dir).get("owner/repo/pdf")
        assert entry is not None
        assert entry.sha == SHA_2
        # update only touches the lock file
        skill = project_dir / ".claude" / "skills" / "pdf" / "SKILL.md"
        assert "v1" in skill.read_text(encoding="utf-8")

    def test_reports_up_to_date(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        cli_runner.invoke(cli, ["install"], obj=ctx)

        result = cli_runner.invoke(cli, ["update"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "owner/repo/pdf is up to date (1111111)" in result.output

    def test_only_named_artifact(
        self,
        cli_runner: CliRunner,
        ctx: AgpmContext,
        remote: FakeRemoteRepo,
        project_dir: Path,
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf", "owner/repo/xlsx"])
        cli_runner.invoke(cli, ["install"], obj=ctx)
        _push(remote, SHA_2, "v2")

        result = cli_runner.invoke(cli, ["update", "pdf"], obj=ctx)

        assert result.exit_code == 0, result.output
        lock = load_lock(project_dir)
        pdf = lock.get("owner/repo/pdf")
        xlsx = lock.get("owner/repo/xlsx")
        assert pdf is not None and pdf.sha == SHA_2
        assert xlsx is not None and xlsx.sha == SHA_1

    def test_unknown_name_fails(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])

        result = cli_runner.invoke(cli, ["update", "docx"], obj=ctx)

        assert result.exit_code == 1
        assert "Artifact not declared: docx" in result.output


class TestRemove:
    def test_removes_declaration_lock_entry_and_files(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf", "owner/repo/xlsx"])
        cli_runner.invoke(cli, ["install"], obj=ctx)

        result = cli_runner.invoke(cli, ["remove", "pdf"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "Deleted: .claude/skills/pdf" in result.output
        assert load_config(project_dir).artifacts == ["owner/repo/xlsx"]
        assert list(load_lock(project_dir).artifacts) == ["owner/repo/xlsx"]
        assert not (project_dir / ".claude" / "skills" / "pdf").exists()
        assert (project_dir / ".claude" / "skills" / "xlsx").is_dir()

    def test_keep_files(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        cli_runner.invoke(cli, ["install"], obj=ctx)

        result = cli_runner.invoke(cli, ["remove", "owner/repo/pdf", "--keep-files"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert load_config(project_dir).artifacts == []
        assert (project_dir / ".claude" / "skills" / "pdf").is_dir()

    def test_ambiguous_name_fails(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf", "other/repo/pdf"])

        result = cli_runner.invoke(cli, ["remove", "pdf"], obj=ctx)

        assert result.exit_code == 1
        assert "ambiguous" in result.output
        assert len(load_config(project_dir).artifacts) == 2

    def test_unknown_name_fails(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])

        result = cli_runner.invoke(cli, ["remove", "docx"], obj=ctx)

        assert result.exit_code == 1
        assert "Artifact not declared: docx" in result.output


class TestList:
    def test_shows_lock_state(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"], collections=["owner/repo/core"])
        before = cli_runner.invoke(cli, ["list"], obj=ctx)
        cli_runner.invoke(cli, ["install"], obj=ctx)

        after = cli_runner.invoke(cli, ["list"], obj=ctx)

        assert before.exit_code == 0, before.output
        assert "unlocked" in before.output
        assert after.exit_code == 0, after.output
        assert "owner/repo/pdf" in after.output
        assert "1111111" in after.output
        assert "Work with PDFs" in after.output
        assert "Collections:" in after.output
        assert "owner/repo/core" in after.output

    def test_nothing_declared(self, cli_runner: CliRunner, ctx: AgpmContext) -> None:
        result = cli_runner.invoke(cli, ["list"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "No artifacts or collections configured." in result.output


class TestVerify:
    def test_no_lock(self, cli_runner: CliRunner, ctx: AgpmContext) -> None:
        result = cli_runner.invoke(cli, ["verify"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "No locked artifacts." in result.output

    def test_clean_cache_verifies(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        cli_runner.invoke(cli, ["install"], obj=ctx)

        result = cli_runner.invoke(cli, ["verify", "--strict"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "owner/repo/pdf" in result.output
        assert "mismatch" not in result.output

    def test_tampered_cache_detected(
        self, cli_runner: CliRunner, ctx: AgpmContext, project_dir: Path
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        cli_runner.invoke(cli, ["install"], obj=ctx)
        tampered = ctx.cache.path_for(SHA_1) / "skills" / "pdf" / "SKILL.md"
        tampered.write_text("tampered\n", encoding="utf-8")

        lenient = cli_runner.invoke(cli, ["verify"], obj=ctx)
        strict = cli_runner.invoke(cli, ["verify", "--strict"], obj=ctx)

        assert lenient.exit_code == 0, lenient.output
        assert "owner/repo/pdf: integrity mismatch" in lenient.output
        assert "1 artifact(s) failed verification" in lenient.output
        assert strict.exit_code == 1

    def test_uncached_is_not_a_failure(
        self,
        cli_runner: CliRunner,
        project_dir: Path,
        agpm_home: Path,
        tmp_path: Path,
        git: FakeGit,
    ) -> None:
        _declare(project_dir, artifacts=["owner/repo/pdf"])
        cli_runner.invoke(
            cli,
            ["install"],
            obj=AgpmContext.for_test(git=git, cwd=project_dir, agpm_home=agpm_home),
        )
        fresh = AgpmContext.for_test(
            git=FakeGit(), cwd=project_dir, agpm_home=tmp_path / "other-home"
        )

        result = cli_runner.invoke(cli, ["verify", "--strict"], obj=fresh)

        assert result.exit_code == 0, result.output
        assert "owner/repo/pdf (not cached)" in result.output
