import subprocess
import sys

from doit.task import Task

FORMATTERS: list[tuple[list[str], int | set[int]]] = [
    (["autoflake", "."], 0),
    (["isort", "."], 0),
    # docformatter returns 3 if it modified any files
    (["docformatter", "."], {0, 3}),
    (["black", "."], 0),
    (["toml-sort", "-i", "pyproject.toml"], 0),
]


def task_format() -> Task:
    """
    Run formatters.
    """
    return Task(
        "format",
        actions=[(_run, (cmd, expect_rc)) for cmd, expect_rc in FORMATTERS],
        targets=[],
        file_dep=[],
    )


def task_test() -> Task:
    """
    Run tests.
    """
    return Task(
        "test",
        actions=[(_run, (["pytest", "test"],))],
        targets=[],
        file_dep=[],
    )


def _run(cmd: list[str], expect_rc: int | set[int] = 0):
    expect_rcs = expect_rc if isinstance(expect_rc, set) else {expect_rc}
    print(f"=== Running: {' '.join(cmd)}")
    rc = subprocess.call(cmd)
    if rc not in expect_rcs:
        sys.exit(f"{cmd[0]} failed: rc={rc}, cmd={cmd}")
