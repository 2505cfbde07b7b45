"""Tests for argument screening."""

from __future__ import annotations

import pytest

from shellbound.core.safety.screener import ArgumentScreener
from shellbound.exceptions import (
    DangerousArgumentError,
    OutsideWorkspaceError,
    PathTraversalError,
)


@pytest.fixture
def screener(resolver):
    return ArgumentScreener(resolver)


class TestSafeArguments:
    @pytest.mark.parametrize(
        "arg",
        [
            "-la",
            "--color=auto",
            "README.md",
            "docs/nested",
            "hello world",
            "a=b",
            "~/docs",
            "50%",
            "",
        ],
    )
    def test_plain_arguments_pass(self, screener, arg):
        assert screener.screen(arg) is None

    def test_absolute_path_inside_workspace_passes(self, screener, workspace):
        screener.screen(str(workspace / "docs"))

    def test_option_value_inside_workspace_passes(self, screener, workspace):
        screener.screen(f"--output={workspace}/out.txt")

    def test_screen_all_accepts_clean_list(self, screener, workspace):
        screener.screen_all(["-la", str(workspace), "src"])


class TestDangerousPatterns:
    @pytest.mark.parametrize(
        ("arg", "reason"),
        [
            ("$(whoami)", "command substitution"),
            ("`id`", "command substitution"),
            ("a`b", "command substitution"),
            ("true&&false", "chaining &&"),
            ("a||b", r"chaining \|\|"),
            ("a;b", "separator"),
            ("a|b", "pipe"),
            ("out>file", "redirection >"),
            ("out>>file", "append redirection"),
            ("<input", "redirection <"),
            ("sleep&", "background"),
            ("${HOME}", "variable expansion"),
            ("$HOME", "environment variable"),
            ("prefix$PATH", "environment variable"),
            ("$?", "special parameter"),
            ("$1", "special parameter"),
        ],
    )
    def test_rejected(self, screener, arg, reason):
        with pytest.raises(DangerousArgumentError, match=reason):
            screener.screen(arg)

    def test_message_names_argument(self, screener):
        with pytest.raises(DangerousArgumentError, match=r"'\$HOME'"):
            screener.screen("$HOME")

    def test_lone_dollar_allowed(self, screener):
        screener.screen("cost: 5$")


class TestTraversal:
    @pytest.mark.parametrize("arg", ["..", "../x", "docs/../../etc", "x..y"])
    def test_dotdot_substring_rejected(self, screener, arg):
        with pytest.raises(PathTraversalError, match="path traversal"):
            screener.screen(arg)

    def test_absolute_dotdot_inside_still_rejected(self, screener, workspace):
        with pytest.raises(PathTraversalError):
            screener.screen(f"{workspace}/docs/../src")


class TestAbsolutePaths:
    @pytest.mark.parametrize("arg", ["/etc/passwd", "/", "/home", "/tmp"])
    def test_outside_rejected(self, screener, arg):
        with pytest.raises(OutsideWorkspaceError):
            screener.screen(arg)

    def test_absolute_escape_via_dotdot_reports_outside(self, screener, workspace):
        with pytest.raises(OutsideWorkspaceError):
            screener.screen(f"{workspace}/../etc")

    def test_option_value_outside_rejected(self, screener):
        with pytest.raises(OutsideWorkspaceError):
            screener.screen("--file=/etc/passwd")


class TestScreenAll:
    def test_first_rejection_wins(self, screener):
        with pytest.raises(OutsideWorkspaceError):
            screener.screen_all(["-la", "/etc/passwd", "$HOME"])

    def test_empty_list(self, screener):
        screener.screen_all([])


class TestNulByte:
    @pytest.mark.parametrize("arg", ["a\x00b", "\x00", "--name=x\x00y"])
    def test_rejected(self, screener, arg):
        with pytest.raises(DangerousArgumentError, match="NUL byte"):
            screener.screen(arg)

    def test_rejected_before_path_check(self, screener):
        with pytest.raises(DangerousArgumentError):
            screener.screen("/etc/passwd\x00")


class TestSymlinkedPaths:
    def test_link_leaving_workspace_rejected(self, screener, workspace):
        (workspace / "link").symlink_to(workspace.parent, target_is_directory=True)
        with pytest.raises(OutsideWorkspaceError):
            screener.screen(f"{workspace}/link/secret")

    def test_option_value_through_link_rejected(self, screener, workspace):
        (workspace / "link").symlink_to(workspace.parent, target_is_directory=True)
        with pytest.raises(OutsideWorkspaceError):
            screener.screen(f"--file={workspace}/link/secret")

    def test_link_inside_workspace_allowed(self, screener, workspace):
        (workspace / "link").symlink_to(workspace / "docs", target_is_directory=True)
        screener.screen(f"{workspace}/link/nested")

    def test_missing_file_inside_workspace_allowed(self, screener, workspace):
        screener.screen(f"{workspace}/docs/new-file.txt")


class TestBlocklistLimits:
    """Arguments the blocklist cannot see through; the allow list is the guard."""

    @pytest.mark.parametrize(
        "arg", ["file:///etc/passwd", "print(open('/etc/passwd').read())"]
    )
    def test_embedded_absolute_paths_pass(self, screener, arg):
        screener.screen(arg)
